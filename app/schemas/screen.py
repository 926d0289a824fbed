"""
Pydantic schema for screen routing decisions.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class RouteDecision(BaseModel):
    """
    What the shell should do for a requested screen.

      - render:   show `screen`
      - redirect: navigate to `screen` instead (replace history entry)
      - loading:  show the loading indicator; decide again once loaded
    """

    model_config = ConfigDict(frozen=True)

    action: Literal["render", "redirect", "loading"]
    screen: str | None = None
