"""Tests for Conduit phase definitions and transition validation."""


from fieldscope.conduit.phases import TERMINAL_PHASES, TIER_PHASES, VALID_TRANSITIONS, Phase


class TestPhaseDefinitions:
    """Test that all phases are properly defined."""

    def test_all_phases_exist(self):
        expected = {
            "INIT", "AI_VISION", "OCR_REGEX", "RAW_OCR",
            "FINALIZE", "COMPLETE", "EXHAUSTED",
        }
        assert {p.value for p in Phase} == expected

    def test_terminal_phases(self):
        assert TERMINAL_PHASES == {Phase.COMPLETE, Phase.EXHAUSTED}

    def test_terminal_phases_have_no_transitions(self):
        for phase in TERMINAL_PHASES:
            assert VALID_TRANSITIONS[phase] == set()

    def test_every_phase_has_transition_entry(self):
        for phase in Phase:
            assert phase in VALID_TRANSITIONS

    def test_tier_order(self):
        assert TIER_PHASES == (Phase.AI_VISION, Phase.OCR_REGEX, Phase.RAW_OCR)

    def test_init_transitions(self):
        assert VALID_TRANSITIONS[Phase.INIT] == {Phase.AI_VISION}

    def test_each_tier_falls_through_or_finalizes(self):
        assert VALID_TRANSITIONS[Phase.AI_VISION] == {Phase.OCR_REGEX, Phase.FINALIZE}
        assert VALID_TRANSITIONS[Phase.OCR_REGEX] == {Phase.RAW_OCR, Phase.FINALIZE}

    def test_last_tier_can_exhaust(self):
        assert VALID_TRANSITIONS[Phase.RAW_OCR] == {Phase.FINALIZE, Phase.EXHAUSTED}

    def test_finalize_only_completes(self):
        assert VALID_TRANSITIONS[Phase.FINALIZE] == {Phase.COMPLETE}

    def test_transitions_only_move_forward(self):
        """No phase may transition to itself or to an earlier phase."""
        order = list(Phase)
        for phase, targets in VALID_TRANSITIONS.items():
            for target in targets:
                assert order.index(target) > order.index(phase), (
                    f"{phase.value} -> {target.value} moves backward"
                )
