"""File operations utilities for the Marzneshin installer."""

import logging
import os
import shutil
import stat

logger = logging.getLogger(__name__)

OWNER_READ_WRITE = stat.S_IRUSR | stat.S_IWUSR  # 600
WORLD_READABLE = OWNER_READ_WRITE | stat.S_IRGRP | stat.S_IROTH  # 644


class FileManager:
    """Manages file operations for the installer."""

    def write_private_file(self, file_path: str, content: str) -> str:
        """
        Write a file readable only by its owner.

        The file is created with mode 600 before any content is written.

        Args:
            file_path: Path to file
            content: Text to write

        Returns:
            str: Path to written file
        """
        fd = os.open(file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OWNER_READ_WRITE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)

        # O_CREAT mode is ignored for files that already existed
        os.chmod(file_path, OWNER_READ_WRITE)

        logger.debug("Wrote private file %s", file_path)
        return file_path

    def replace_file(self, source_path: str, target_path: str, mode: int = WORLD_READABLE) -> str:
        """
        Replace target with a copy of source.

        An existing target is removed before copying.

        Args:
            source_path: File to copy
            target_path: Destination file path
            mode: Permission mode for the copy

        Returns:
            str: Path to the copy
        """
        if os.path.isfile(target_path):
            logger.info("Removing existing file at %s", target_path)
            os.remove(target_path)

        shutil.copyfile(source_path, target_path)
        self.set_file_permissions(target_path, mode)

        return target_path

    def set_file_permissions(self, file_path: str, mode: int) -> None:
        """
        Set file permissions.

        Args:
            file_path: Path to file
            mode: Permission mode (e.g., 0o600)
        """
        os.chmod(file_path, mode)

        logger.debug("Set permissions %s for %s", oct(mode), file_path)

    def backup_file(self, file_path: str, backup_suffix: str = ".bak") -> str:
        """
        Copy a file next to itself, overwriting any previous backup.

        Args:
            file_path: Path to file to backup
            backup_suffix: Suffix for backup file

        Returns:
            str: Path to backup file
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        backup_path = file_path + backup_suffix
        shutil.copy2(file_path, backup_path)

        logger.info("Backup of %s created at %s", file_path, backup_path)
        return backup_path
