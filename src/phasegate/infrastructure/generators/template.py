"""
Deterministic markdown template generator.

Produces a structured document per artifact type without calling a model.
The output is identical for identical input, which makes it usable for
dry runs and demos.
"""

from phasegate.domain.interfaces import ContentGeneratorInterface

TEMPLATES: dict[str, str] = {
    "spec": (
        "# {title}\n\n"
        "## Overview\n{prompt}\n\n"
        "## Requirements\n"
        "- Functional requirement: {prompt}\n"
        "- Non-functional requirement: responses complete within agreed limits\n"
        "- Each requirement has acceptance criteria\n\n"
        "## Acceptance Criteria\n"
        "- Given the feature is enabled, when it is used, then it works\n"
    ),
    "design": (
        "# {title} Design\n\n"
        "## Architecture\n"
        "Layered architecture separating domain, application and adapters.\n\n"
        "## Components\n"
        "- Domain model for {prompt}\n"
        "- Application service orchestrating the use case\n"
        "- Infrastructure adapters for persistence and I/O\n\n"
        "## Data Flow\n"
        "Requests enter through the service and are persisted by adapters.\n"
    ),
    "implementation": (
        "# {title} Implementation\n\n"
        "## Plan\n"
        "- Implement domain objects for {prompt}\n"
        "- Wire the application service\n"
        "- Add adapters and configuration\n\n"
        "## Notes\n"
        "Follow the design document and keep modules small.\n"
    ),
    "test": (
        "# {title} Tests\n\n"
        "## Test Cases\n"
        "- Test case: happy path for {prompt}\n"
        "- Test case: invalid input is rejected\n"
        "- Test case: failures are reported without side effects\n\n"
        "## Coverage\n"
        "Unit and integration tests for every component.\n"
    ),
    "review": (
        "# {title} Review\n\n"
        "## Checklist\n"
        "- Requirements traced to tests\n"
        "- Design followed by the implementation\n"
        "- Test cases pass\n\n"
        "## Findings\n"
        "No blocking issues for {prompt}.\n"
    ),
}

DEFAULT_TEMPLATE = "# {title}\n\n## Content\n- {prompt}\n"


class TemplateContentGenerator(ContentGeneratorInterface):
    """Fills a per-type markdown template with the prompt."""

    def __init__(self, templates: dict[str, str] | None = None):
        """
        Args:
            templates: Overrides keyed by content type; missing types fall
                back to the built-in templates
        """
        self._templates = {**TEMPLATES, **(templates or {})}

    def generate_content(
        self,
        prompt: str,
        content_type: str,
        agent_hint: str | None = None,
    ) -> str:
        template = self._templates.get(content_type, DEFAULT_TEMPLATE)
        title = prompt.strip().splitlines()[0][:80] if prompt.strip() else "Untitled"
        return template.format(title=title, prompt=prompt.strip())
