"""Complex amplitude value type."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Amplitude:
    """
    Complex coefficient of one basis state.

    The state vector itself stores amplitudes as ``numpy.complex128``; this
    type is what callers get back when they ask for individual entries.
    """

    re: float = 0.0
    im: float = 0.0

    @classmethod
    def from_complex(cls, value: complex) -> "Amplitude":
        value = complex(value)
        return cls(re=float(value.real), im=float(value.imag))

    def magnitude_squared(self) -> float:
        """|z|^2, the Born-rule probability of this basis state."""
        return self.re * self.re + self.im * self.im

    def conjugate(self) -> "Amplitude":
        return Amplitude(re=self.re, im=-self.im)

    def __complex__(self) -> complex:
        return complex(self.re, self.im)

    def __repr__(self) -> str:
        return f"Amplitude(re={self.re:.6g}, im={self.im:.6g})"
