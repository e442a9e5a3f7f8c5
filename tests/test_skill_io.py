"""Tests for SKILL.md import and export."""

from skilldex.registry import Skill
from skilldex.skill_io import DYNAMIC_INSTRUCTION, skill_from_markdown, skill_to_markdown
from tests.conftest import make_weather_skill


class TestSkillToMarkdown:
    def test_front_matter_body_and_tools(self):
        skill = make_weather_skill(
            version="1.2.0", tags=["forecast"], triggers=["rain", "sun"], required_scopes=["weather"]
        )

        text = skill_to_markdown(skill)

        assert text.startswith("---\nname: weather\nslug: weather\nversion: 1.2.0\n")
        assert "requires: [weather]" in text
        assert "# Weather\n\nUse the forecast tool" in text
        assert "## Tools\n\n- **forecast**: Daily forecast for a city\n  Parameters: city:" in text
        assert "- **radar**: Live radar" in text

    def test_dynamic_instruction_placeholder(self):
        async def instruction(ctx):
            return "dynamic"

        text = skill_to_markdown(Skill(name="dyn", description="d", instruction=instruction))

        assert DYNAMIC_INSTRUCTION in text
        assert "## Tools" not in text


class TestSkillFromMarkdown:
    def test_round_trip_of_metadata(self):
        original = make_weather_skill(version="1.0", tags=["a", "b"], triggers=["rain"], icon="cloud")

        imported = skill_from_markdown(skill_to_markdown(original))

        assert imported.name == "weather"
        assert imported.version == "1.0"
        assert imported.tags == ["a", "b"]
        assert imported.triggers == ["rain"]
        assert imported.icon == "cloud"
        assert imported.description == "Weather forecasts"
        assert imported.tools == []
        assert imported.instruction.startswith("# Weather")

    def test_missing_front_matter(self):
        skill = skill_from_markdown("Just instructions.")
        assert skill.name == "unnamed"
        assert skill.slug == "unnamed"
        assert skill.instruction == "Just instructions."

    def test_comma_separated_lists(self):
        skill = skill_from_markdown("---\nname: ops\nrequires: sre, oncall\n---\nBody")
        assert skill.required_scopes == ["sre", "oncall"]
        assert skill.slug == "ops"
