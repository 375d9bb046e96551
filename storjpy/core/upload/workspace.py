"""
Workspace management.

Each upload job gets its own temporary directory for the ciphertext.
The manager keeps track of open workspaces so a session abort can sweep them.
"""
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..exceptions import WorkspaceError
from .models import Workspace

logger = logging.getLogger('storjpy.upload.workspace')


class WorkspaceManager:
    """
    Allocates and releases per-job temporary directories.
    
    Responsibilities:
    - Create a unique directory per job
    - Derive the encrypted file path
    - Remove the directory exactly once
    """
    
    ENCRYPTED_SUFFIX = '.crypt'
    
    def __init__(self, base_dir: Optional[Union[str, Path]] = None, prefix: str = 'storjpy-'):
        """
        Initialize workspace manager.
        
        Args:
            base_dir: Parent directory for workspaces (system temp dir if None)
            prefix: Directory name prefix
        """
        self._base_dir = str(base_dir) if base_dir is not None else None
        self._prefix = prefix
        self._open: Dict[Path, Workspace] = {}
    
    @property
    def open_workspaces(self) -> List[Workspace]:
        return list(self._open.values())
    
    def allocate(self, filename: str) -> Workspace:
        """
        Create a workspace for one file.
        
        Args:
            filename: Display name of the source file
            
        Returns:
            New workspace
            
        Raises:
            WorkspaceError: If the directory cannot be created
        """
        try:
            tmp_dir = Path(tempfile.mkdtemp(prefix=self._prefix, dir=self._base_dir))
        except OSError as e:
            logger.error(f"Unable to create temp directory for file {filename}")
            raise WorkspaceError(
                f"Unable to create temp directory: {e}", filename=filename
            ) from e
        
        workspace = Workspace(
            path=tmp_dir,
            encrypted_path=tmp_dir / f"{filename}{self.ENCRYPTED_SUFFIX}",
            on_release=self._remove
        )
        self._open[tmp_dir] = workspace
        logger.debug(f"Workspace allocated: {tmp_dir}")
        return workspace
    
    def release_all(self) -> int:
        """
        Release every workspace still open.
        
        Returns:
            Number of workspaces released by this call
        """
        released = 0
        for workspace in list(self._open.values()):
            if workspace.release():
                released += 1
        return released
    
    def _remove(self, workspace: Workspace) -> None:
        self._open.pop(workspace.path, None)
        try:
            shutil.rmtree(workspace.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove workspace {workspace.path}: {e}")
        else:
            logger.debug(f"Workspace removed: {workspace.path}")
