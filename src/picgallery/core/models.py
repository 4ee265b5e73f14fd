"""Gallery data model.

An :class:`Album` is a read-only view over one ``pics/original/<name>/``
container, recomputed from the backend listing on every run.  Pictures are
plain filenames relative to their album.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Album(BaseModel):
    """One album of the gallery.

    Attributes:
        name: Album identifier, equal to the storage container name.
        cover_image: Picture shown for the album on the homepage.
        pictures: Picture filenames in alphabetical order (never empty).
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    cover_image: str
    pictures: tuple[str, ...] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_cover_image(self) -> Album:
        if list(self.pictures) != sorted(self.pictures):
            raise ValueError("pictures must be sorted alphabetically")
        if self.cover_image != self.pictures[0]:
            raise ValueError(
                f"cover image {self.cover_image!r} must be the first picture {self.pictures[0]!r}"
            )
        return self

    @classmethod
    def from_pictures(cls, name: str, pictures: Iterable[str]) -> Album:
        """Build an album from an unordered picture listing.

        Args:
            name: Album name.
            pictures: Picture filenames in any order.

        Returns:
            Album with sorted pictures and the first one as cover image.

        Raises:
            pydantic.ValidationError: If ``pictures`` is empty.
        """
        ordered = tuple(sorted(pictures))
        return cls(name=name, cover_image=ordered[0] if ordered else "", pictures=ordered)

    # Names used by the page templates.
    @property
    def Name(self) -> str:  # noqa: N802
        return self.name

    @property
    def CoverImage(self) -> str:  # noqa: N802
        return self.cover_image

    @property
    def Pictures(self) -> tuple[str, ...]:  # noqa: N802
        return self.pictures
