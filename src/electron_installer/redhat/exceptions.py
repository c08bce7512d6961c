class InstallerError(Exception):
    pass


class ConfigurationError(InstallerError):
    pass


class MetadataError(InstallerError):
    pass


class StagingError(InstallerError):
    pass


class TemplateRenderError(InstallerError):
    pass


class AssetError(InstallerError):
    pass


class ProcessError(InstallerError):
    def __init__(
        self,
        message: str,
        command: str,
        args: list[str],
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command
        self.arguments = args
        self.returncode = returncode
        self.stderr = stderr


class CollectionError(InstallerError):
    pass
