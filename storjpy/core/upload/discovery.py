"""
File discovery.

Expands path and glob selectors into the ordered list of files to upload.
Failures are returned as values so the coordinator treats them as ordinary
validation outcomes.
"""
import glob
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..exceptions import (
    FileDiscoveryError,
    FileNotFoundInSelectionError,
    FileAccessError,
    EmptySelectionError,
)

logger = logging.getLogger('storjpy.upload.discovery')

Selector = Union[str, Path]


@dataclass(frozen=True)
class DiscoveryResult:
    """Either the discovered paths or the discovery error."""
    paths: List[Path] = field(default_factory=list)
    error: Optional[FileDiscoveryError] = None
    
    @property
    def ok(self) -> bool:
        return self.error is None


class FileDiscovery:
    """
    Expands selectors to absolute, readable, regular files.
    
    Each selector is expanded with glob (recursive '**' allowed) and its
    matches are sorted, so the result order only depends on the selector
    order. Directories are skipped. Duplicates keep their first position.
    """
    
    def discover(self, selectors: Union[Selector, Sequence[Selector]]) -> DiscoveryResult:
        """
        Expand selectors into a file list.
        
        Args:
            selectors: One selector or a sequence of them
            
        Returns:
            DiscoveryResult with paths, or with the first error found
        """
        if isinstance(selectors, (str, Path)):
            selectors = [selectors]
        
        paths: List[Path] = []
        seen = set()
        
        for selector in selectors:
            matches = self._expand(selector)
            if not matches:
                return DiscoveryResult(
                    error=FileNotFoundInSelectionError(
                        f"{selector} could not be found", path=selector
                    )
                )
            
            for match in matches:
                if not match.is_file():
                    logger.debug(f"Skipping non-file entry: {match}")
                    continue
                if not os.access(match, os.R_OK):
                    return DiscoveryResult(
                        error=FileAccessError(f"{match} is not readable", path=match)
                    )
                if match not in seen:
                    seen.add(match)
                    paths.append(match)
        
        if not paths:
            return DiscoveryResult(
                error=EmptySelectionError("0 files specified to be uploaded.")
            )
        
        logger.debug(f"Discovered {len(paths)} file(s)")
        return DiscoveryResult(paths=paths)
    
    def _expand(self, selector: Selector) -> List[Path]:
        pattern = os.path.expanduser(str(selector))
        if os.path.exists(pattern):
            matches = [pattern]
        elif glob.has_magic(pattern):
            matches = sorted(glob.glob(pattern, recursive=True))
        else:
            matches = []
        return [Path(match).resolve() for match in matches]
