"""
Strength Model

Effective match strength from a team's base rating, venue and form.
"""

from __future__ import annotations

from simulation.models import Form, FormTrend, SimulationSettings


class StrengthModel:
    """Combines base rating, home advantage and form into one number."""

    FORM_SCALE = 20  # (score - 0.5) * 20 spans -10..+10
    TREND_ADJUSTMENTS = {
        FormTrend.IMPROVING: 5,
        FormTrend.DECLINING: -5,
    }

    def __init__(self, settings: SimulationSettings | None = None) -> None:
        self.settings = settings or SimulationSettings()

    def effective_strength(self, base_strength: float, form: Form, is_home: bool) -> float:
        """
        Calculate effective strength for a single match.

        Args:
            base_strength: Team's base rating (1-100)
            form: Team's current form
            is_home: Whether the team plays at home

        Returns:
            Effective strength, never below the configured floor
        """
        strength = float(base_strength)

        if is_home:
            strength += self.settings.home_advantage

        strength += (form.score - 0.5) * self.FORM_SCALE
        strength += self.TREND_ADJUSTMENTS.get(form.trend, 0)

        return max(self.settings.strength_floor, strength)
