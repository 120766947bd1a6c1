"""
Tests for loading and validating game definitions.

Tests:
- Schema validation and conversion to flow blocks
- Player count handling
- Reference, formula and configuration errors
- Warnings for definitions that may not finish
"""

import json

import pytest

from ..definition import load_definition, parse_definition, validate_definition
from ..errors import DefinitionError
from ..flow.blocks import (
    ConditionBlock,
    EndGameBlock,
    InputBlock,
    InputFieldType,
    MoveComponentBlock,
    PhaseBlock,
    PhaseRepetition,
    PickMethod,
    SetVariableBlock,
)


def minimal(**overrides):
    definition = {
        "numPlayers": 2,
        "flow": [{"type": "event", "eventType": "endGame", "winners": "=[]"}],
    }
    definition.update(overrides)
    return definition


class TestLoading:
    """Tests for converting JSON into a GameDefinition."""

    def test_full_definition(self, high_card_definition):
        """Every part of a definition is converted."""
        definition = parse_definition(high_card_definition)
        assert definition.name == "High Card"
        assert definition.player_count.min == 2
        assert definition.player_count.max == 4
        assert 3 in definition.player_count
        assert 5 not in definition.player_count
        assert definition.playing_card_deck[0] == {"Rank": 1}

        deal = definition.phases["Deal"]
        assert deal.repetition is PhaseRepetition.FOR_EACH_PLAYER
        assert isinstance(deal.blocks[0], MoveComponentBlock)
        assert deal.blocks[0].pick_method is PickMethod.DRAW

        play = definition.phases["Play"]
        assert play.view == "Table"
        assert isinstance(play.blocks[0], InputBlock)
        assert play.blocks[0].form[0].field_type is InputFieldType.CARD
        assert play.blocks[0].form[0].is_option_valid == "=c => true"

        assert isinstance(definition.flow[0], PhaseBlock)
        assert isinstance(definition.flow[2], EndGameBlock)
        assert [e.label for e in definition.views["Table"].elements] == ["Current player", "Hand"]

    def test_num_players(self):
        """numPlayers fixes the player count."""
        definition = parse_definition(minimal())
        assert definition.player_count.min == definition.player_count.max == 2

    def test_player_count_required(self):
        """Either playerCount or numPlayers must be given."""
        raw = minimal()
        del raw["numPlayers"]
        with pytest.raises(DefinitionError) as exc_info:
            parse_definition(raw)
        assert any("playerCount or numPlayers" in e for e in exc_info.value.errors)

    def test_nested_blocks(self):
        """Condition branches and inline phases are converted recursively."""
        definition = parse_definition(minimal(flow=[
            {
                "type": "phase",
                "repetition": "forever",
                "blocks": [
                    {
                        "type": "condition",
                        "expression": "=round > 3",
                        "whenTrue": [{"type": "event", "eventType": "endGame", "winners": "=players"}],
                    },
                    {"type": "event", "eventType": "setVariable", "variable": "round", "expression": "=round + 1"},
                ],
            },
        ]))
        phase = definition.flow[0]
        assert phase.repetition is PhaseRepetition.FOREVER
        assert isinstance(phase.blocks[0], ConditionBlock)
        assert isinstance(phase.blocks[0].when_true[0], EndGameBlock)
        assert isinstance(phase.blocks[1], SetVariableBlock)

    def test_unknown_block_type(self):
        """Unknown block kinds are reported with their path."""
        with pytest.raises(DefinitionError) as exc_info:
            parse_definition(minimal(flow=[{"type": "teleport"}]))
        assert exc_info.value.errors == ["flow[0]: unknown block type 'teleport'"]

    def test_unknown_event_type(self):
        """Unknown event kinds are reported."""
        with pytest.raises(DefinitionError) as exc_info:
            parse_definition(minimal(flow=[{"type": "event", "eventType": "explode"}]))
        assert "unknown eventType" in exc_info.value.errors[0]

    def test_errors_are_collected(self):
        """All block errors are reported together."""
        with pytest.raises(DefinitionError) as exc_info:
            parse_definition(minimal(flow=[
                {"type": "event", "eventType": "setVariable"},
                {"type": "input", "form": [{"name": "x", "type": "colour"}]},
            ]))
        errors = exc_info.value.errors
        assert any(e.startswith("flow[0]") for e in errors)
        assert any(e.startswith("flow[1]") for e in errors)

    def test_load_from_file(self, tmp_path, high_card_definition):
        """Definitions can be read from JSON files."""
        path = tmp_path / "game.json"
        path.write_text(json.dumps(high_card_definition), encoding="utf-8")
        assert load_definition(path).name == "High Card"

    def test_invalid_json(self, tmp_path):
        """Broken JSON is a definition error."""
        path = tmp_path / "game.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DefinitionError):
            load_definition(path)


class TestValidation:
    """Tests for static definition checks."""

    def test_valid_definition(self, high_card_definition):
        """The sample game is valid without warnings."""
        result = validate_definition(parse_definition(high_card_definition, validate=False))
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_unknown_phase(self):
        """Phase blocks must reference defined phases."""
        raw = minimal(flow=[{"type": "phase", "phase": "Nope"}])
        result = validate_definition(parse_definition(raw, validate=False))
        assert not result.valid
        assert "flow[0]: unknown phase 'Nope'" in result.errors

    def test_unknown_view(self, high_card_definition):
        """Phase and input views must be defined."""
        high_card_definition["phases"]["Play"]["view"] = "Nope"
        result = validate_definition(parse_definition(high_card_definition, validate=False))
        assert not result.valid
        assert any("unknown view 'Nope'" in e for e in result.errors)

    def test_invalid_formula(self):
        """Formulas that do not parse are errors."""
        raw = minimal(flow=[
            {"type": "event", "eventType": "setVariable", "variable": "x", "expression": "=1 +"},
            {"type": "event", "eventType": "endGame", "winners": "=[]"},
        ])
        result = validate_definition(parse_definition(raw, validate=False))
        assert result.errors == ["flow[0].expression: invalid expression '=1 +'"]

    def test_plain_values_are_not_parsed(self):
        """Values without '=' are literals."""
        raw = minimal(flow=[
            {"type": "event", "eventType": "setVariable", "variable": "x", "expression": "1 +"},
            {"type": "event", "eventType": "endGame", "winners": "=[]"},
        ])
        assert validate_definition(parse_definition(raw, validate=False)).valid

    def test_invalid_player_range(self):
        """max must not be below min."""
        raw = minimal(playerCount={"min": 4, "max": 2})
        del raw["numPlayers"]
        result = validate_definition(parse_definition(raw, validate=False))
        assert "playerCount.max must be >= playerCount.min" in result.errors

    def test_find_needs_expression(self):
        """The find pick method needs a find expression."""
        raw = minimal(globalVariables={"deck": {"collection": []}, "pile": {"collection": []}}, flow=[
            {
                "type": "event",
                "eventType": "moveComponent",
                "source": "=deck",
                "destination": "=pile",
                "pickMethod": "find",
            },
            {"type": "event", "eventType": "endGame", "winners": "=[]"},
        ])
        result = validate_definition(parse_definition(raw, validate=False))
        assert not result.valid
        assert "pickFindExpression" in result.errors[0]

    def test_missing_end_game_warns(self):
        """A flow without endGame is valid but warned about."""
        raw = minimal(flow=[
            {"type": "event", "eventType": "setVariable", "variable": "x", "expression": 1},
        ])
        result = validate_definition(parse_definition(raw, validate=False))
        assert result.valid
        assert "No endGame block is reachable from the flow" in result.warnings

    def test_end_game_in_named_phase(self):
        """endGame inside a referenced phase counts."""
        raw = minimal(
            phases={"Finish": {"blocks": [{"type": "event", "eventType": "endGame", "winners": "=[]"}]}},
            flow=[{"type": "phase", "phase": "Finish"}],
        )
        assert validate_definition(parse_definition(raw, validate=False)).warnings == []

    def test_endless_forever_phase_warns(self):
        """A forever phase that cannot end is warned about."""
        raw = minimal(flow=[
            {
                "type": "phase",
                "repetition": "forever",
                "blocks": [{"type": "event", "eventType": "setVariable", "variable": "x", "expression": 1}],
            },
            {"type": "event", "eventType": "endGame", "winners": "=[]"},
        ])
        result = validate_definition(parse_definition(raw, validate=False))
        assert result.valid
        assert result.warnings == ["flow[0]: forever phase has no endPhase or endGame block"]

    def test_validate_on_parse(self):
        """parse_definition raises on invalid definitions by default."""
        with pytest.raises(DefinitionError) as exc_info:
            parse_definition(minimal(flow=[{"type": "phase", "phase": "Nope"}]))
        assert "flow[0]: unknown phase 'Nope'" in exc_info.value.errors
