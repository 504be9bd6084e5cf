"""
Screening Engine

Population-wide strategy screens over a ``TabularStore``.
"""

from typing import Dict, Type

from fairprice.domain.services.screening.base import BaseScreen, MissingValue, NoCandidates, SkipCandidate
from fairprice.domain.services.screening.dividend import DividendScreen
from fairprice.domain.services.screening.enhanced_graham import EnhancedGrahamScreen
from fairprice.domain.services.screening.graham import GrahamScreen
from fairprice.domain.services.screening.howard import HowardScreen
from fairprice.domain.services.screening.lynch import LynchScreen
from fairprice.domain.services.screening.quality import QualityScreen
from fairprice.domain.services.screening.srim import SrimScreen

SCREENS: Dict[str, Type[BaseScreen]] = {
    screen.name: screen
    for screen in (
        GrahamScreen,
        EnhancedGrahamScreen,
        LynchScreen,
        SrimScreen,
        QualityScreen,
        HowardScreen,
        DividendScreen,
    )
}


def get_screen(name: str) -> Type[BaseScreen]:
    """
    Look up a screen class by name.

    Raises:
        KeyError: for an unknown screen name
    """
    try:
        return SCREENS[name]
    except KeyError:
        raise KeyError(f"Unknown screen '{name}'; available: {', '.join(SCREENS)}") from None


__all__ = [
    "BaseScreen",
    "DividendScreen",
    "EnhancedGrahamScreen",
    "GrahamScreen",
    "HowardScreen",
    "LynchScreen",
    "MissingValue",
    "NoCandidates",
    "QualityScreen",
    "SCREENS",
    "SkipCandidate",
    "SrimScreen",
    "get_screen",
]
