"""
Node environment management.

This module prepares and tears down the local data directory a development
node needs, and copies the node binaries out of their build trees:

- init:   create the data directories, copy the genesis and validator
          configuration and, in file storage mode, create and initialize the
          trie database file
- delete: truncate the trie database device (device mode) and remove the data
          directory after confirmation
- copy:   copy the configured binaries into the root directory
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, List, Optional

from ..models.config import EnvironmentConfig
from ..system.commands import run_command
from ..validation import MonitorEnvironmentError

logger = logging.getLogger(__name__)

COMMANDS = ("init", "del", "copy")


class EnvironmentManager:
    """
    Runs the init, delete and copy operations for one EnvironmentConfig.
    """

    def __init__(
        self,
        config: EnvironmentConfig,
        confirm: Callable[[str], str] = input,
        assume_yes: bool = False,
    ):
        """
        Args:
            config: Environment configuration
            confirm: Prompt function returning the user's answer
            assume_yes: Skip the deletion prompt
        """
        self.config = config
        self.confirm = confirm
        self.assume_yes = assume_yes

    @property
    def data_dir(self) -> Path:
        return self.config.data_dir

    @property
    def ledger_dir(self) -> Path:
        return self.data_dir / "node" / "ledger"

    def required_directories(self) -> List[Path]:
        """Directories created by init for the configured storage mode."""
        directories = [
            self.ledger_dir,
            self.data_dir / "forkpoint",
            self.data_dir / "validators",
        ]
        if self.config.storage_mode == "file":
            directories.insert(1, self.data_dir / "node" / "triedb")
        return directories

    # --- init ---

    def init(self) -> None:
        """
        Initialize the node data directory.

        Raises:
            MonitorEnvironmentError: If a config template or binary is missing,
                or a binary fails
        """
        logger.info("Starting node environment initialization...")
        logger.info(f"Root directory: {self.config.root_dir}")
        logger.info(f"Data directory: {self.data_dir}")

        for directory in self.required_directories():
            directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"'{directory}' created.")

        self._copy_config(
            self.config.genesis_config, self.data_dir / "forkpoint" / "forkpoint.toml"
        )
        self._copy_config(
            self.config.validators_config, self.data_dir / "validators" / "validators.toml"
        )

        if self.config.storage_mode == "file":
            self.create_sparse_file()
            self._run_binary(
                self.config.mpt_binary,
                ["--storage", str(self.config.triedb_path), "--create"],
            )
            logger.info("TrieDB initialization complete.")
            self._run_binary(
                self.config.execution_binary,
                [
                    "--chain",
                    self.config.chain,
                    "--db",
                    str(self.config.triedb_path),
                    "--block_db",
                    str(self.ledger_dir),
                    "--nblocks",
                    "0",
                    "--log_level",
                    "ERROR",
                ],
            )
            logger.info("Genesis state written successfully.")

        logger.info("Node environment has been set up successfully.")

    def _copy_config(self, relative_source: str, destination: Path) -> None:
        source = self.config.root_dir / relative_source
        if not source.is_file():
            raise MonitorEnvironmentError(
                f"Configuration template '{source}' not found.", path=str(source)
            )
        shutil.copyfile(source, destination)
        logger.info(f"Config file prepared at '{destination}'.")

    def create_sparse_file(self) -> bool:
        """
        Create the trie database as a sparse file of the configured size.

        Returns:
            False if the file already existed and was left untouched.
        """
        path = self.config.triedb_path
        if path.exists():
            logger.info(f"File '{path}' already exists, skipping creation.")
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.truncate(self.config.triedb_size_bytes)
        logger.info(f"'{path}' ({self.config.triedb_size_bytes} bytes) created.")
        return True

    # --- delete ---

    def delete(self) -> bool:
        """
        Remove the data directory after confirmation.

        In device mode the trie database device is truncated first.

        Returns:
            True if the data directory was removed.
        """
        logger.info(f"Starting deletion of the '{self.data_dir}' directory...")
        if self.config.storage_mode == "device":
            self._run_binary(
                self.config.mpt_binary,
                ["--storage", str(self.config.triedb_device), "--truncate", "--yes"],
            )
            logger.info("TrieDB truncation complete.")

        if not self.data_dir.is_dir():
            logger.info(f"The '{self.data_dir}' directory does not exist. Nothing to do.")
            return False

        if not self.assume_yes:
            answer = self.confirm(
                f"Are you sure you want to permanently delete the '{self.data_dir}' "
                "directory and all its contents? (y/N): "
            )
            if answer.strip() not in ("y", "Y"):
                logger.info("Deletion canceled.")
                return False

        shutil.rmtree(self.data_dir)
        logger.info("Deletion complete.")
        return True

    # --- copy ---

    def bft_source_dir(self) -> Path:
        """
        The debug build directory if present, otherwise the release one.

        Raises:
            MonitorEnvironmentError: If neither exists
        """
        target = self.config.root_dir / self.config.bft_target_dir
        for profile in ("debug", "release"):
            candidate = target / profile
            if candidate.is_dir():
                logger.info(f"Found '{profile}' build directory. Copying from {profile} path.")
                return candidate
        raise MonitorEnvironmentError(
            f"Could not find 'debug' or 'release' build directories in '{target}'. "
            "Please build the bft project first.",
            path=str(target),
        )

    def copy(self) -> List[Path]:
        """
        Copy the configured binaries into the root directory.

        Returns:
            Paths of the binaries that were copied; missing ones are skipped.
        """
        bft_dir = self.bft_source_dir()
        cxx_dir = self.config.root_dir / self.config.cxx_build_dir

        copied = []
        logger.info("Copying bft binaries...")
        for name in self.config.bft_binaries:
            copied_path = self._copy_binary(bft_dir / name)
            if copied_path is not None:
                copied.append(copied_path)
        logger.info("Copying execution binaries...")
        for name in self.config.cxx_binaries:
            copied_path = self._copy_binary(cxx_dir / name)
            if copied_path is not None:
                copied.append(copied_path)

        logger.info("Binary copy process completed.")
        return copied

    def _copy_binary(self, source: Path) -> Optional[Path]:
        if not source.is_file():
            logger.warning(f"Binary not found at '{source}'. Skipping.")
            return None
        destination = self.config.root_dir / source.name
        shutil.copy2(source, destination)
        logger.info(f"Copied {source.name}")
        return destination

    # --- helpers ---

    def _run_binary(self, name: str, args: List[str]) -> str:
        """
        Run a binary from the root directory.

        Raises:
            MonitorEnvironmentError: If the binary is missing or exits non-zero
        """
        binary = self.config.root_dir / name
        if not binary.is_file():
            raise MonitorEnvironmentError(
                f"'./{name}' not found. Did you run copy?", path=str(binary)
            )
        command = [str(binary)] + args
        return_code, stdout, stderr = run_command(command, cwd=self.config.root_dir)
        if return_code != 0:
            raise MonitorEnvironmentError(
                f"'./{name}' failed with exit code {return_code}: {stderr.strip()}",
                path=str(binary),
            )
        return stdout

    def run(self, command: str) -> None:
        """
        Dispatch one of COMMANDS.

        Raises:
            ValueError: If the command is unknown
        """
        if command == "init":
            self.init()
        elif command == "del":
            self.delete()
        elif command == "copy":
            self.copy()
        else:
            raise ValueError(f"Unknown command: {command}")
