"""claimcheck: offload large message bodies to blob storage.

Implements the claim-check pattern as two pipeline hooks:
- AttachmentWriter.before_send stores oversized bodies and leaves a reference
- AttachmentReader.after_receive resolves the reference back into the body
"""

from claimcheck.clock import INFINITE_TTL, fixed_clock, utc_now
from claimcheck.config import AttachmentConfiguration, Settings
from claimcheck.criteria import always, any_of, body_size_exceeds, content_type_matches
from claimcheck.errors import (
    ClaimCheckError,
    ConfigurationError,
    ProtocolMismatchError,
    StorageError,
)
from claimcheck.message import Message
from claimcheck.pipeline import (
    ClaimCheck,
    MessagePipeline,
    PipelineStage,
    create_claim_check,
    use_claim_check,
)
from claimcheck.reader import AttachmentInfo, AttachmentReader
from claimcheck.writer import AttachmentWriter

__version__ = "0.1.0"

__all__ = [
    "INFINITE_TTL",
    "AttachmentConfiguration",
    "AttachmentInfo",
    "AttachmentReader",
    "AttachmentWriter",
    "ClaimCheck",
    "ClaimCheckError",
    "ConfigurationError",
    "Message",
    "MessagePipeline",
    "PipelineStage",
    "ProtocolMismatchError",
    "Settings",
    "StorageError",
    "always",
    "any_of",
    "body_size_exceeds",
    "content_type_matches",
    "create_claim_check",
    "fixed_clock",
    "use_claim_check",
    "utc_now",
]
