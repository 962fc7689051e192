class TraceHelpError(Exception):
    """Base class for errors raised by tracehelp itself."""


class ConfigurationError(TraceHelpError):
    """Bootstrap configuration is invalid or could not be applied."""


class ResourceError(ConfigurationError):
    pass


class ExporterError(ConfigurationError):
    pass
