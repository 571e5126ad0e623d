"""Release packager.

Moves a freshly built binary into the release output directory under a
name derived only from the project binary name and the platform tag.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import structlog

from relkit_core.build.models import BinaryArtifact, ReleaseArtifact
from relkit_core.errors import PackagingError
from relkit_core.platforms import PlatformRequest

logger = structlog.get_logger(__name__)

DEFAULT_BINARY_NAME = "gh-jj"


def release_file_name_for(platform_tag: str, binary_name: str = DEFAULT_BINARY_NAME) -> str:
    """Release file name for a platform tag.

    Example:
        >>> release_file_name_for("linux-amd64")
        'gh-jj-linux-amd64'
    """
    return f"{binary_name}-{platform_tag}"


class ReleasePackager:
    """Places built binaries into the release output directory.

    Attributes:
        output_dir: Release output directory (created on demand).
        binary_name: Project binary base name.
    """

    def __init__(self, output_dir: Path, binary_name: str = DEFAULT_BINARY_NAME) -> None:
        self.output_dir = output_dir
        self.binary_name = binary_name
        self._log = logger.bind(component="release_packager", output_dir=str(output_dir))

    def package(self, binary: BinaryArtifact, request: PlatformRequest) -> ReleaseArtifact:
        """Move ``binary`` to ``<output_dir>/<binary_name>-<tag>``.

        The build output path is not valid afterwards. An existing file with
        the release name is replaced; other files in the directory are left
        alone.

        Args:
            binary: Binary produced by the project builder.
            request: Resolved platform; its tag names the file.

        Returns:
            ReleaseArtifact for the written file.

        Raises:
            PackagingError: If the binary is missing or the destination
                cannot be created or written.
        """
        if not binary.path.is_file():
            raise PackagingError(f"Built binary not found at {binary.path}")

        name = release_file_name_for(request.release_tag, self.binary_name)
        destination = self.output_dir / name
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            if destination.is_dir():
                raise PackagingError(f"Release path {destination} is a directory")
            shutil.move(str(binary.path), str(destination))
        except OSError as e:
            raise PackagingError(
                f"Cannot write release artifact {destination}: {e.strerror or e}",
                internal_details=repr(e),
            ) from e

        self._log.info(
            "release_packaged",
            path=str(destination),
            platform_tag=request.release_tag,
            triple=binary.triple,
        )
        return ReleaseArtifact(path=destination, platform_tag=request.release_tag)
