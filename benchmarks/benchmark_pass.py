import time
import numpy as np

from planetsim import Body, System
from planetsim.integrators import Generation
from planetsim.physics_utils import run_pass


def random_cluster(n, seed=0):
    rng = np.random.default_rng(seed)
    bodies = []
    for i in range(n):
        pos = rng.uniform(-1e11, 1e11, 3)
        vel = rng.uniform(-1e3, 1e3, 3)
        bodies.append(Body(rng.uniform(1e22, 1e25), pos, vel, radius=1e6, name=f"b{i}"))
    return System("cluster", bodies)


if __name__ == "__main__":
    for n in (2, 10, 50):
        system = random_cluster(n)
        snapshot = system.generation()
        buffers = (Generation(n), Generation(n))

        # warm up JIT
        run_pass(snapshot, buffers, system.masses, system.radii, system.system_mass, 1.0, 1.0)

        t0 = time.time()
        final = run_pass(
            snapshot, buffers, system.masses, system.radii, system.system_mass, 3600.0, 36.0
        )
        t1 = time.time()
        print(f"{n:3d} bodies: {t1 - t0:.3f}s per 100-step pass, "
              f"error < {final.max_position_error():.3e} m")
