"""
Assembly driver using Hydra for configuration.

Usage:
    uv run python main.py mesh.path=meshes/square.msh mesh.dirichlet=[1] coefficients.f=1.0
    uv run python main.py mesh.path=meshes/square.msh coefficients.gN1=mypkg.flux.inflow
"""

import logging
from pathlib import Path

import hydra
import numpy as np
import scipy.sparse as sp
from hydra.core.hydra_config import HydraConfig
from omegaconf import DictConfig, OmegaConf

from femeq import Mesh, assemble

log = logging.getLogger(__name__)


def load_mesh(cfg: DictConfig) -> Mesh:
    path = hydra.utils.to_absolute_path(cfg.mesh.path)
    return Mesh.from_meshio(
        path,
        dirichlet=list(cfg.mesh.dirichlet),
        neumann=list(cfg.mesh.neumann),
    )


def save_system(path: Path, gMat: sp.csr_matrix, gVec: np.ndarray, n2d: np.ndarray) -> None:
    """Write the matrix next to an archive holding the load vector and DOF map."""
    path.parent.mkdir(parents=True, exist_ok=True)
    sp.save_npz(path.with_name(f"{path.stem}_matrix.npz"), gMat)
    np.savez(path, gVec=gVec, n2d=n2d)


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    log.debug(f"Config:\n{OmegaConf.to_yaml(cfg)}")

    mesh = load_mesh(cfg)
    log.info(
        f"Mesh: {mesh.nonodes} nodes, {mesh.noelms} elements, "
        f"{mesh.noedges} edges, {mesh.nDOF} DOFs"
    )

    coef = cfg.coefficients
    gMat, gVec, n2d = assemble(
        mesh, coef.a, coef.b, coef.f, coef.gD, coef.gN1, coef.gN2
    )

    output_dir = Path(HydraConfig.get().runtime.output_dir)
    out = output_dir / cfg.output.path
    save_system(out, gMat, gVec, n2d)
    log.info(f"Saved system to {out}")


if __name__ == "__main__":
    main()
