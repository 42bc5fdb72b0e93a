"""Error types raised by the runner and the document generators.

Runner errors never escape a run: they are turned into reported failures
scoped to one case (or one test for setup/teardown). Synthesis errors abort
the whole ``generate`` call.
"""

from enum import Enum


class ContractError(Exception):
    """Base class for all api-contract errors."""


class SetupError(ContractError):
    """A test's set_up hook failed."""


class TeardownError(ContractError):
    """A test's tear_down hook failed."""


class TemplateError(ContractError):
    """A path template placeholder could not be resolved."""


class EncodingError(ContractError):
    """A value has no JSON representation."""


class TransportError(ContractError):
    """The HTTP transport failed to deliver a request."""


class SynthesisError(ContractError):
    """Base class for errors that abort document generation."""


class SchemaReflectionError(SynthesisError):
    """An example value could not be turned into a schema."""


class SerializationError(SynthesisError):
    """The serializer failed to render a document."""


class FailureKind(str, Enum):
    SETUP = "setup"
    TEARDOWN = "teardown"
    TEMPLATE = "template"
    ENCODING = "encoding"
    TRANSPORT = "transport"
    ASSERTION = "assertion"
