from .step_00_preflight import PreflightStep
from .step_10_resolve_runtime import ResolveRuntimeStep
from .step_20_probe_accelerator import ProbeAcceleratorStep
from .step_30_install_system_packages import InstallSystemPackagesStep
from .step_40_resolve_project_dir import ResolveProjectDirStep
from .step_50_setup_venv import SetupVenvStep
from .step_60_install_torch import InstallTorchStep
from .step_65_verify_torch import VerifyTorchStep
from .step_70_install_aux_libs import InstallAuxLibsStep
from .step_80_install_nemo import InstallNemoStep
from .step_90_generate_artifacts import GenerateArtifactsStep
from .step_95_smoke_test import SmokeTestStep
from .step_99_summary import SummaryStep

__all__ = [
    "PreflightStep",
    "ResolveRuntimeStep",
    "ProbeAcceleratorStep",
    "InstallSystemPackagesStep",
    "ResolveProjectDirStep",
    "SetupVenvStep",
    "InstallTorchStep",
    "VerifyTorchStep",
    "InstallAuxLibsStep",
    "InstallNemoStep",
    "GenerateArtifactsStep",
    "SmokeTestStep",
    "SummaryStep",
]
