"""
Placement directives.

A component's `position` is persisted as a single token: either "center"
(the tree root), a face ("top", "front-left", ...) or a face followed by a
specific anchor on that face ("front-left-back-right"). Position splits the
token into that face and the optional sub-anchor so the delimiter never has
to be guessed at the use site.
"""

from dataclasses import dataclass
from typing import Optional

CENTER = "center"
NONE_ATTACHMENT = "none"

# Longest first so "front-left-x" is never read as face "front"
FACES = (
    "front-left",
    "front-right",
    "back-left",
    "back-right",
    "top",
    "bottom",
    CENTER,
)

# Attaching on a face of the reference shape means the new shape's
# diagonally opposite anchor meets that face's anchor.
CONTACT_ANCHORS = {
    "top": "bottom",
    "front-left": "back-right",
    "front-right": "back-left",
    "back-left": "front-right",
    "back-right": "front-left",
}


@dataclass(frozen=True)
class Position:
    """A face plus an optional specific anchor on that face."""
    face: str
    anchor: Optional[str] = None

    @classmethod
    def parse(cls, token: str) -> 'Position':
        """Split a position token into face and sub-anchor.

        Tokens whose face is not one of FACES come back whole as the face,
        and `is_known` is False for them.
        """
        token = token.strip()
        for face in FACES:
            if token == face:
                return cls(face)
            if token.startswith(face + "-"):
                return cls(face, token[len(face) + 1:] or None)
        return cls(token)

    @property
    def token(self) -> str:
        return f"{self.face}-{self.anchor}" if self.anchor else self.face

    @property
    def is_center(self) -> bool:
        return self.face == CENTER

    @property
    def is_known(self) -> bool:
        return self.face in FACES

    @property
    def reference_anchor(self) -> str:
        """Anchor name looked up on the reference component."""
        return self.token

    @property
    def contact_anchor(self) -> Optional[str]:
        """Anchor name looked up on the component being placed."""
        return CONTACT_ANCHORS.get(self.face)

    def __str__(self) -> str:
        return self.token


def resolve_position(position: str, attachment_point: Optional[str]) -> str:
    """Pick the specific attachment point over the plain position.

    "none" is what a shell passes when the user chose no specific point.
    """
    if attachment_point and attachment_point != NONE_ATTACHMENT:
        return attachment_point
    return position
