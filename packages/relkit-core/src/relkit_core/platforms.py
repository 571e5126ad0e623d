"""Target resolution for release builds.

This module maps a platform request onto a compiler target triple and
the platform tag used in release file names:
- Platform: Table of supported platforms with paired triple and tag
- PlatformRequest: The resolved (triple, tag) pair for one build
- resolve_platform: Apply optional overrides on top of the defaults
"""

from __future__ import annotations

from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field

from relkit_core.errors import ConfigurationError

logger = structlog.get_logger(__name__)


class Platform(Enum):
    """Supported release platforms.

    Each member carries its compiler triple and release tag as a fixed pair.

    Example:
        >>> Platform.LINUX_ARM64.triple
        'aarch64-unknown-linux-gnu'
        >>> Platform.LINUX_ARM64.tag
        'linux-arm64'
    """

    LINUX_AMD64 = ("x86_64-unknown-linux-gnu", "linux-amd64")
    LINUX_ARM64 = ("aarch64-unknown-linux-gnu", "linux-arm64")
    DARWIN_AMD64 = ("x86_64-apple-darwin", "darwin-amd64")
    DARWIN_ARM64 = ("aarch64-apple-darwin", "darwin-arm64")
    WINDOWS_AMD64 = ("x86_64-pc-windows-msvc", "windows-amd64")

    @property
    def triple(self) -> str:
        """Compiler target triple."""
        return self.value[0]

    @property
    def tag(self) -> str:
        """Release platform tag."""
        return self.value[1]

    @classmethod
    def from_triple(cls, triple: str) -> Platform | None:
        """Look up the platform compiled for ``triple``."""
        for member in cls:
            if member.triple == triple:
                return member
        return None

    @classmethod
    def from_tag(cls, tag: str) -> Platform | None:
        """Look up the platform labelled ``tag``."""
        for member in cls:
            if member.tag == tag:
                return member
        return None


DEFAULT_PLATFORM = Platform.LINUX_AMD64
DEFAULT_TRIPLE = DEFAULT_PLATFORM.triple
DEFAULT_TAG = DEFAULT_PLATFORM.tag


class PlatformRequest(BaseModel):
    """Resolved platform for a single build.

    Attributes:
        compiler_triple: Target triple handed to the compiler.
        release_tag: Tag used in the release file name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    compiler_triple: str = Field(default=DEFAULT_TRIPLE, min_length=1)
    release_tag: str = Field(default=DEFAULT_TAG, min_length=1)

    @property
    def known_platform(self) -> Platform | None:
        """Platform whose pair matches this request exactly, if any."""
        platform = Platform.from_triple(self.compiler_triple)
        if platform is not None and platform.tag == self.release_tag:
            return platform
        return None

    @property
    def is_consistent(self) -> bool:
        """False when triple and tag belong to two different known platforms.

        Unknown triples or tags are not judged here.
        """
        by_triple = Platform.from_triple(self.compiler_triple)
        by_tag = Platform.from_tag(self.release_tag)
        if by_triple is None or by_tag is None:
            return True
        return by_triple is by_tag


def resolve_platform(
    triple: str | None = None,
    tag: str | None = None,
    *,
    strict: bool = False,
) -> PlatformRequest:
    """Resolve optional overrides into a fully populated PlatformRequest.

    Each field falls back to its own default independently; supplying only
    one override never changes the other field.

    Args:
        triple: Compiler triple override. Empty or None uses DEFAULT_TRIPLE.
        tag: Release tag override. Empty or None uses DEFAULT_TAG.
        strict: Reject pairs that contradict the Platform table.

    Returns:
        PlatformRequest for the build.

    Raises:
        ConfigurationError: If strict and the pair is inconsistent.

    Example:
        >>> resolve_platform(triple="aarch64-unknown-linux-gnu").release_tag
        'linux-amd64'
    """
    request = PlatformRequest(
        compiler_triple=triple or DEFAULT_TRIPLE,
        release_tag=tag or DEFAULT_TAG,
    )

    if not request.is_consistent:
        if strict:
            raise ConfigurationError(
                f"Platform tag '{request.release_tag}' does not match compiler triple "
                f"'{request.compiler_triple}'",
                component="target_resolver",
            )
        logger.warning(
            "platform_mismatch",
            compiler_triple=request.compiler_triple,
            release_tag=request.release_tag,
        )

    logger.debug(
        "platform_resolved",
        compiler_triple=request.compiler_triple,
        release_tag=request.release_tag,
        triple_overridden=bool(triple),
        tag_overridden=bool(tag),
    )
    return request
