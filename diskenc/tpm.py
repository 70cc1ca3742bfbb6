# tpm.py - TPM unsealing through tpm2-tools
"""
Unseals a device's real passphrase from the TPM.

Each TPM-protected device has a sealed object context file under the
configured object directory (e.g. /var/lib/diskenc/tpm/sda1.ctx). A PIN,
when the device uses one, is the object's auth value.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Union

from diskenc.core.constants import Defaults
from diskenc.core.limits import Limits
from diskenc.core.paths import Paths
from diskenc.errors import UnsealError

_tpm_logger = logging.getLogger("DiskEnc.tpm")


class Tpm2Unsealer:
    """
    SecretUnsealer backed by `tpm2_unseal`.

    Usage:
        unsealer = Tpm2Unsealer(Path("/var/lib/diskenc/tpm"))
        secret = unsealer.unseal("/dev/sda1", "1234")
    """

    def __init__(
        self,
        object_dir: Union[str, Path] = Defaults.TPM_OBJECT_DIR,
        tool: str = Defaults.TPM_UNSEAL_TOOL,
        timeout: float = Limits.TPM_UNSEAL_TIMEOUT,
    ):
        self.object_dir = Path(object_dir)
        self.tool = tool
        self.timeout = timeout

    def build_command(self, device: str, auxiliary: str) -> List[str]:
        cmd = [self.tool, "-c", str(Paths.tpm_object_file(self.object_dir, device))]
        if auxiliary:
            cmd.extend(["-p", f"str:{auxiliary}"])
        return cmd

    def unseal(self, device: str, auxiliary: str) -> str:
        """
        Unseal the secret for `device`.

        Raises:
            UnsealError: Missing object, tool failure, or timeout
        """
        ctx = Paths.tpm_object_file(self.object_dir, device)
        if not ctx.exists():
            raise UnsealError(device, f"sealed object not found: {ctx}")

        try:
            result = subprocess.run(
                self.build_command(device, auxiliary),
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise UnsealError(device, f"{self.tool} not installed or not in PATH") from e
        except subprocess.TimeoutExpired as e:
            raise UnsealError(device, f"{self.tool} timed out after {self.timeout}s") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise UnsealError(device, f"{self.tool} exited with {result.returncode}: {stderr[:200]}")

        _tpm_logger.info(f"Unsealed secret for {device}")
        return result.stdout.decode("utf-8", errors="replace").rstrip("\n")
