"""
Template loading and rendering utilities using Jinja2.
"""

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

from delivery_build.util.files import write_text

# Templates ship inside the package
PACKAGE_TEMPLATES = Path(__file__).parent.parent / "templates"


def _ruby_string(value) -> str:
    """Quote a value as a single-quoted Ruby string literal."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class TemplateLoader:
    """
    Loads and renders Jinja2 templates.

    Supports custom templates in the workspace with fallback to the packaged defaults.
    """

    def __init__(self, workspace_root: Path | None = None):
        """
        Initialize template loader.

        Args:
            workspace_root: Path to workspace directory (None for packaged templates only)
        """
        self.workspace_root = workspace_root
        self.workspace_templates = workspace_root / "templates" if workspace_root else None
        self.default_templates = PACKAGE_TEMPLATES
        self._env: Environment | None = None
        self._template_cache: dict[str, Template] = {}

    def has_custom_templates(self) -> bool:
        """Check if workspace has custom templates."""
        return self.workspace_templates is not None and self.workspace_templates.exists()

    @property
    def env(self) -> Environment:
        """
        Get or create Jinja2 environment (cached).

        Returns:
            Cached Jinja2 Environment configured for template loading
        """
        if self._env is None:
            template_dirs = []

            # Check workspace templates first
            if self.has_custom_templates():
                template_dirs.append(str(self.workspace_templates))

            if self.default_templates.exists():
                template_dirs.append(str(self.default_templates))

            if not template_dirs:
                raise FileNotFoundError("No template directories found")

            self._env = Environment(
                loader=FileSystemLoader(template_dirs),
                trim_blocks=True,
                lstrip_blocks=True,
                keep_trailing_newline=True,
                undefined=StrictUndefined,
            )
            self._env.filters["ruby_string"] = _ruby_string

        return self._env

    def get_template_path(self, template_name: str) -> Path:
        """
        Get path to template file, preferring workspace over defaults.

        Args:
            template_name: Template name (e.g., "omnibus/project.rb.j2")

        Returns:
            Path to template file
        """
        if self.has_custom_templates():
            workspace_template = self.workspace_templates / template_name
            if workspace_template.exists():
                return workspace_template

        default_template = self.default_templates / template_name
        if default_template.exists():
            return default_template

        raise FileNotFoundError(f"Template '{template_name}' not found in workspace or defaults")

    def load_template(self, template_name: str) -> Template:
        """Load a Jinja2 template with caching."""
        if template_name not in self._template_cache:
            # Verify template exists (will raise if not found)
            self.get_template_path(template_name)
            self._template_cache[template_name] = self.env.get_template(template_name)

        return self._template_cache[template_name]

    def render(self, template_name: str, context: dict) -> str:
        """Render a template to a string."""
        template = self.load_template(template_name)
        context = dict(context)
        context.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        return template.render(**context)

    def render_template(
        self, template_name: str, context: dict, output_file: Path, mode: int | None = None
    ) -> None:
        """
        Render a template and write to file.

        Args:
            template_name: Template name (e.g., "omnibus/publish.rb.j2")
            context: Dictionary of template variables
            output_file: Path to write rendered output
            mode: Optional file permissions for the written file
        """
        write_text(output_file, self.render(template_name, context), mode=mode)
