from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .command import run_cmd, which

logger = logging.getLogger(__name__)

_CUDA_RE = re.compile(r"CUDA Version:\s*([0-9.]+)")


@dataclass(frozen=True)
class AcceleratorInfo:
    gpu_present: bool = False
    gpu_name: Optional[str] = None
    driver_present: bool = False
    driver_version: Optional[str] = None
    cuda_version: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.gpu_present and self.driver_present

    @property
    def cuda_major(self) -> Optional[int]:
        return cuda_major(self.cuda_version)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["available"] = self.available
        return d


def cuda_major(version: Optional[str]) -> Optional[int]:
    if not version:
        return None
    head = version.strip().split(".")[0]
    return int(head) if head.isdigit() else None


def parse_lspci_gpu(lspci_out: str, vendor_pattern: str = "nvidia") -> Optional[str]:
    """Return the device name of the first matching lspci line, or None.

    lspci lines look like "01:00.0 VGA compatible controller: NVIDIA Corporation ...";
    the name is everything after the second ':' (the bus address holds the first).
    """

    pattern = vendor_pattern.lower()
    for line in (lspci_out or "").splitlines():
        if pattern in line.lower():
            fields = line.split(":", 2)
            return (fields[2] if len(fields) > 2 else line).strip()
    return None


def parse_cuda_version(smi_out: str) -> Optional[str]:
    m = _CUDA_RE.search(smi_out or "")
    return m.group(1) if m else None


def _detect_driver() -> Dict[str, Optional[str]]:
    info: Dict[str, Optional[str]] = {"driver_version": None, "cuda_version": None}

    r = run_cmd(
        ["nvidia-smi", "--query-gpu=driver_version", "--format=csv,noheader,nounits"],
        check=False,
    )
    if r.ok and r.stdout.strip():
        info["driver_version"] = r.stdout.strip().splitlines()[0].strip()

    r = run_cmd(["nvidia-smi"], check=False)
    if r.ok:
        info["cuda_version"] = parse_cuda_version(r.stdout)
    return info


def detect_accelerator(vendor_pattern: str = "nvidia") -> AcceleratorInfo:
    """Hardware enumeration via lspci, driver/CUDA via nvidia-smi."""

    if not which("lspci"):
        logger.debug("lspci not available; assuming no GPU")
        return AcceleratorInfo()

    r = run_cmd(["lspci"], check=False)
    gpu_name = parse_lspci_gpu(r.stdout, vendor_pattern) if r.ok else None
    if gpu_name is None:
        return AcceleratorInfo()

    if not which("nvidia-smi"):
        return AcceleratorInfo(gpu_present=True, gpu_name=gpu_name)

    drv = _detect_driver()
    return AcceleratorInfo(
        gpu_present=True,
        gpu_name=gpu_name,
        driver_present=True,
        driver_version=drv["driver_version"],
        cuda_version=drv["cuda_version"],
    )
