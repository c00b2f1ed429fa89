"""
Custom exceptions for delivery-build with helpful error messages.
"""


class DeliveryBuildError(Exception):
    """Base exception for delivery-build errors."""

    def __init__(self, message: str, suggestion: str = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.message)

    def __str__(self):
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class WorkspaceError(DeliveryBuildError):
    """Errors related to build workspace management."""

    pass


class WorkspaceNotFoundError(WorkspaceError):
    """Workspace not found or not initialized."""

    def __init__(self, path: str = None):
        message = "Not in a delivery-build workspace."
        if path:
            message = f"No delivery-build workspace found at: {path}"

        suggestion = (
            "Initialize a new workspace with:\n"
            "  delivery-build init <workspace-dir>\n\n"
            "Or pass an existing one with --workspace."
        )
        super().__init__(message, suggestion)


class NodeNotFoundError(WorkspaceError):
    """Job dna file is missing from the workspace."""

    def __init__(self, path: str):
        message = f"Job dna not found: {path}"
        suggestion = (
            "The Delivery builder writes chef/dna.json before running a phase.\n"
            "For a local run, create it by hand with a 'delivery.change' section."
        )
        super().__init__(message, suggestion)


class ConfigurationError(DeliveryBuildError):
    """Configuration file errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid."""

    def __init__(self, error_details: str):
        message = f"Invalid configuration file: {error_details}"

        suggestion = (
            "Fix the delivery-build.yaml file.\n"
            "You can regenerate the default configuration:\n"
            "  mv delivery-build.yaml delivery-build.yaml.backup\n"
            "  delivery-build init .\n\n"
            "Then merge your settings back from the backup."
        )
        super().__init__(message, suggestion)


class MissingProjectConfigError(ConfigurationError):
    """The .delivery/project.toml file does not exist."""

    def __init__(self, path: str):
        message = f"The .delivery/project.toml file was not found: {path}"
        suggestion = "You can generate this file using the command:\n  chef generate build-cookbook [NAME]"
        super().__init__(message, suggestion)


class ProjectConfigParseError(ConfigurationError):
    """The .delivery/project.toml file could not be parsed."""

    def __init__(self, error_details: str):
        super().__init__(f"Unable to parse .delivery/project.toml: {error_details}")


class RemoteProjectConfigError(ConfigurationError):
    """A remote_file project.toml could not be fetched."""

    def __init__(self, url: str, error_details: str):
        self.url = url
        message = f"Unable to fetch remote project.toml from {url}: {error_details}"
        suggestion = "Check the remote_file URL in .delivery/project.toml and that the host is reachable."
        super().__init__(message, suggestion)


class LocalPhasesNotFoundError(ConfigurationError):
    """project.toml has no [local_phases] table."""

    def __init__(self):
        message = "No [local_phases] table found in .delivery/project.toml"
        suggestion = (
            "Add the phases you want to run locally:\n"
            "  [local_phases]\n"
            '  unit = "rspec spec/"\n'
            '  lint = "cookstyle"'
        )
        super().__init__(message, suggestion)


class CommandError(DeliveryBuildError):
    """Errors raised while running external commands."""

    pass


class CommandFailedError(CommandError):
    """External command exited with an unexpected status."""

    def __init__(self, argv: list[str], returncode: int, stderr: str = ""):
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr

        message = f"Command failed ({returncode}): {' '.join(argv)}"
        if stderr:
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class PhaseError(DeliveryBuildError):
    """Errors related to pipeline phases."""

    pass


class PhaseNotFoundError(PhaseError):
    """Unknown phase name."""

    def __init__(self, phase: str, available: list[str]):
        message = f"Unknown phase: {phase}"
        suggestion = "Phases must be one of:\n  - " + "\n  - ".join(available)
        super().__init__(message, suggestion)


class UnsupportedPlatformError(PhaseError):
    """Operation has no implementation for the detected platform family."""

    def __init__(self, family: str, operation: str):
        message = f"{operation} is not supported on platform family '{family}'"
        super().__init__(message)


class RollbackError(PhaseError):
    """Restoring the backed-up install directory failed."""

    pass


class ArtifactoryError(DeliveryBuildError):
    """Errors related to Artifactory publishing and promotion."""

    pass


class InvalidResourceError(ArtifactoryError):
    """An Artifactory publish resource has a missing or malformed attribute."""

    def __init__(self, attribute: str, reason: str):
        self.attribute = attribute
        message = f"Invalid value for '{attribute}': {reason}"
        suggestion = (
            "Check the artifactory section of delivery-build.yaml:\n"
            "  artifactory:\n"
            "    endpoint: https://artifactory.example.com\n"
            "    base_path: com/getchef"
        )
        super().__init__(message, suggestion)


class ArtifactoryAPIError(ArtifactoryError):
    """Artifactory REST API call failed."""

    def __init__(self, action: str, status_code: int, body: str = ""):
        self.status_code = status_code
        message = f"Artifactory {action} failed with HTTP {status_code}"
        if body:
            message += f": {body.strip()}"
        super().__init__(message)


class SecretsNotFoundError(DeliveryBuildError):
    """Data bag item holding project secrets was not found."""

    def __init__(self, bag: str, item: str, path: str):
        message = f"Secrets item '{bag}/{item}' not found at: {path}"
        suggestion = (
            "Place the decrypted data bag item in the workspace:\n"
            f"  etc/data_bags/{bag}/{item}.json"
        )
        super().__init__(message, suggestion)


def format_error_for_cli(error: Exception) -> str:
    """
    Format an exception for CLI display with helpful information.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, DeliveryBuildError):
        output = f"[red]Error:[/red] {error.message}"
        if error.suggestion:
            output += f"\n\n[yellow]{error.suggestion}[/yellow]"
        return output
    else:
        return f"[red]Error:[/red] {str(error)}"
