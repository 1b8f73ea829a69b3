"""Viewing state machine for validating phase transitions."""

from livevip.schemas import ViewingPhase


class ViewingStateMachine:
    """Transition table for the viewing session.

    Phase flow with triggers:
    - IDLE -> VIEWING (eligible stream selected) | GATED (VIP-only stream selected without premium)
    - VIEWING -> VIEWING (another stream selected) | GATED (budget exhausted, VIP-only
      selection, entitlement revoked) | IDLE (close)
    - GATED -> VIEWING (upgrade, premium resolved, prompt dismissed, eligible selection)
      | GATED (another VIP-only selection) | IDLE (close)

    There is no terminal phase: the session survives navigation and closing.
    """

    TRANSITIONS: dict[ViewingPhase, set[ViewingPhase]] = {
        ViewingPhase.IDLE: {
            ViewingPhase.VIEWING,
            ViewingPhase.GATED,
        },
        ViewingPhase.VIEWING: {
            ViewingPhase.VIEWING,
            ViewingPhase.GATED,
            ViewingPhase.IDLE,
        },
        ViewingPhase.GATED: {
            ViewingPhase.GATED,
            ViewingPhase.VIEWING,
            ViewingPhase.IDLE,
        },
    }

    @classmethod
    def can_transition(cls, current: ViewingPhase, new: ViewingPhase) -> bool:
        """Check if a phase transition is valid.

        Args:
            current: Current phase
            new: Target phase

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def get_valid_transitions(cls, phase: ViewingPhase) -> set[ViewingPhase]:
        return cls.TRANSITIONS.get(phase, set())

    @classmethod
    def get_valid_sources(cls, target: ViewingPhase) -> set[ViewingPhase]:
        return {phase for phase, targets in cls.TRANSITIONS.items() if target in targets}
