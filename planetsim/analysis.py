import csv
import os
from collections import deque

from .physics import system_energy


class PassHistory:
    """Records the trial step and error bound of every pass attempt.

    Pass :meth:`update` as the ``progress`` callback of
    :func:`~planetsim.physics_utils.integrate`.
    """

    def __init__(self, max_records=None):
        self.records = deque(maxlen=max_records)
        self.total = 0

    def __len__(self):
        return len(self.records)

    def update(self, step_size, error):
        self.total += 1
        self.records.append((float(step_size), float(error)))

    @property
    def accepted_step(self):
        """Step size of the most recent pass, or ``None`` before any pass."""
        return self.records[-1][0] if self.records else None

    def export_csv(self, file, delimiter=","):
        """Export the recorded passes to a CSV file.

        Parameters
        ----------
        file : str or file-like
            Destination filename or open file object.
        delimiter : str, optional
            Delimiter used between columns (default is ',').
        """
        close = False
        if isinstance(file, (str, bytes, os.PathLike)):
            f = open(file, "w", newline="")
            close = True
        else:
            f = file
        try:
            writer = csv.writer(f, delimiter=delimiter)
            writer.writerow(["attempt", "step_size_s", "error_bound_m"])
            for i, (step, error) in enumerate(self.records, 1):
                writer.writerow([i, step, error])
        finally:
            if close:
                f.close()


def energy_drift(initial_bodies, final_bodies, g_constant):
    """Relative change of total energy between two snapshots."""
    _, _, e0 = system_energy(initial_bodies, g_constant)
    _, _, e1 = system_energy(final_bodies, g_constant)
    if e0 == 0:
        return 0.0 if e1 == 0 else float("inf")
    return (e1 - e0) / abs(e0)
