"""Exceptions raised by the simulator."""


class CollisionDetected(RuntimeError):
    """Two bodies touched.  The run cannot continue."""

    def __init__(self, first, second, names=None):
        self.first = first
        self.second = second
        if names is not None:
            self.names = (names[first], names[second])
        else:
            self.names = (f"Body {first}", f"Body {second}")
        super().__init__(
            f"COLLISION DETECTED BETWEEN {self.names[0]} AND {self.names[1]}"
        )


class ToleranceUnattainable(RuntimeError):
    """The stepper gave up before the error bound fell below tolerance."""

    def __init__(self, step_size, error, tolerance):
        self.step_size = step_size
        self.error = error
        self.tolerance = tolerance
        super().__init__(
            f"error bound {error:g} m at step {step_size:g} s does not reach "
            f"tolerance {tolerance:g} m"
        )


class MalformedSystemFile(ValueError):
    """A system description file could not be parsed."""

    def __init__(self, filename, line_number, message):
        self.filename = str(filename)
        self.line_number = line_number
        super().__init__(f"{self.filename}:{line_number}: {message}")
