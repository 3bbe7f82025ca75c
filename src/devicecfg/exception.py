"""Device configuration exception definitions"""


class DeviceCfgError(Exception):
    """Base exception for devicecfg"""

    pass


class ShapeMismatchError(DeviceCfgError):
    """Fragment does not structurally match a candidate variant (recovered inside the decoder)"""

    def __init__(self, message: str, candidate: str | None = None):
        super().__init__(message)
        self.candidate = candidate


class MalformedDocumentError(DeviceCfgError):
    """Document or fragment is not even minimally well-formed"""

    def __init__(self, message: str, location: str | None = None):
        super().__init__(message)
        self.location = location


class ConfigurationRangeError(DeviceCfgError):
    """A field violates a declared bound"""

    def __init__(self, message: str, field: str | None = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value


class WidthMismatchError(DeviceCfgError):
    """Declared scalar type width disagrees with the register quantity"""

    def __init__(self, message: str, value_type: str | None = None, quantity: int | None = None):
        super().__init__(message)
        self.value_type = value_type
        self.quantity = quantity
