"""Tests for the phasegate command line."""

import json
import logging

import pytest
from click.testing import CliRunner

from phasegate.cli import cli
from phasegate.infrastructure import GeneratorRegistry, TemplateContentGenerator
from phasegate.infrastructure.persistence import FilesystemWorkflowRepository

PHASES = ("spec", "design", "implementation", "test", "review")

GOOD_SPEC = (
    "# Checkout Specification\n\n"
    "## Requirements\n"
    "- Each requirement is traced to a test\n"
    "- Customers can pay with a stored card\n"
    "- Orders are confirmed by email\n"
)


class ShortDesignGenerator(TemplateContentGenerator):
    """Template output, except the design is too short to pass the gate."""

    def generate_content(self, prompt, content_type, agent_hint=None):
        if content_type == "design":
            return "TBD"
        return super().generate_content(prompt, content_type, agent_hint)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_phasegate_logger():
    """`run` installs handlers on the package logger; drop them afterwards."""
    yield
    logger = logging.getLogger("phasegate")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def plan_file(tmp_path):
    path = tmp_path / "plan.json"
    path.write_text(
        json.dumps(
            {
                "name": "checkout",
                "description": "Checkout feature",
                "tasks": [
                    {"description": f"Checkout {phase}", "type": phase}
                    for phase in PHASES
                ],
            }
        )
    )
    return path


class TestScoreCommand:
    """Tests for `phasegate score`."""

    def test_passing_file(self, runner, tmp_path):
        """A well-structured spec passes with exit code 0."""
        path = tmp_path / "spec.md"
        path.write_text(GOOD_SPEC)

        result = runner.invoke(cli, ["score", str(path), "--type", "spec"])

        assert result.exit_code == 0
        assert "PASS" in result.output

    def test_failing_file_exits_one(self, runner, tmp_path):
        """Too-short content fails with exit code 1."""
        path = tmp_path / "spec.md"
        path.write_text("Short")

        result = runner.invoke(cli, ["score", str(path), "--type", "spec"])

        assert result.exit_code == 1
        assert "FAIL" in result.output
        assert "Content is too short" in result.output

    def test_score_below_threshold_exits_one(self, runner, tmp_path):
        """Valid content under the threshold still fails the command."""
        path = tmp_path / "notes.md"
        path.write_text("a plain sentence")

        result = runner.invoke(cli, ["score", str(path), "--type", "review"])

        assert result.exit_code == 1
        assert "FAIL" in result.output
        assert "Quality score 0.70 below threshold 0.80" in result.output

    def test_threshold_option(self, runner, tmp_path):
        """--threshold lowers the bar."""
        path = tmp_path / "notes.md"
        path.write_text("a plain sentence")

        result = runner.invoke(
            cli, ["score", str(path), "--type", "review", "--threshold", "0.5"]
        )

        assert result.exit_code == 0

    def test_unknown_type_is_a_usage_error(self, runner, tmp_path):
        """An unknown --type is rejected by click."""
        path = tmp_path / "spec.md"
        path.write_text(GOOD_SPEC)

        result = runner.invoke(cli, ["score", str(path), "--type", "deploy"])

        assert result.exit_code == 2


class TestAlignCommand:
    """Tests for `phasegate align`."""

    def test_requires_a_document(self, runner):
        """align without any document is a usage error."""
        result = runner.invoke(cli, ["align"])

        assert result.exit_code == 2
        assert "Supply at least one" in result.output

    def test_reports_alignment(self, runner, tmp_path):
        """align prints the overall score and recommendations."""
        product = tmp_path / "product.md"
        product.write_text("## Vision Statement\n- vision\n## Mission Statement\n")
        structure = tmp_path / "structure.md"
        structure.write_text("## Layers\n- domain layer\n")

        result = runner.invoke(
            cli, ["align", "--product", str(product), "--structure", str(structure)]
        )

        assert result.exit_code == 0
        assert "Overall alignment" in result.output
        assert "Add architecture coverage to the structure document" in result.output


class TestRunCommand:
    """Tests for `phasegate run`."""

    def test_template_run_completes(self, runner, plan_file):
        """A plan run with templates completes."""
        result = runner.invoke(cli, ["run", str(plan_file)])

        assert result.exit_code == 0, result.output
        assert "Workflow status: completed" in result.output

    def test_artifact_dir_persists_workflow(self, runner, plan_file, tmp_path):
        """--artifact-dir saves the workflow and the event log."""
        artifact_dir = tmp_path / "artifacts"

        result = runner.invoke(
            cli, ["run", str(plan_file), "--artifact-dir", str(artifact_dir)]
        )

        assert result.exit_code == 0, result.output
        saved = list((artifact_dir / "workflows").glob("*.json"))
        assert len(saved) == 1
        repository = FilesystemWorkflowRepository(artifact_dir)
        blob = repository.load_workflow(saved[0].stem)
        assert blob["status"] == "completed"
        assert len(blob["tasks"]) == len(PHASES)
        assert (artifact_dir / "events" / "lifecycle.jsonl").exists()

    def test_failing_gate_exits_one(self, runner, plan_file):
        """A phase that fails the gate makes the run exit 1."""
        GeneratorRegistry.register("short-design", ShortDesignGenerator)
        try:
            result = runner.invoke(
                cli, ["run", str(plan_file), "--generator", "short-design"]
            )
        finally:
            GeneratorRegistry.reset()

        assert result.exit_code == 1
        assert "Workflow status: failed" in result.output

    def test_invalid_plan_exits_two(self, runner, tmp_path):
        """A plan that fails the schema exits 2."""
        plan = tmp_path / "plan.json"
        plan.write_text(json.dumps({"name": "x", "tasks": []}))

        result = runner.invoke(cli, ["run", str(plan)])

        assert result.exit_code == 2

    def test_unknown_generator_exits_two(self, runner, plan_file):
        """An unknown --generator exits 2."""
        result = runner.invoke(cli, ["run", str(plan_file), "--generator", "nope"])

        assert result.exit_code == 2

    def test_preset_option(self, runner, plan_file):
        result = runner.invoke(cli, ["run", str(plan_file), "--preset", "research"])

        assert result.exit_code == 0, result.output
