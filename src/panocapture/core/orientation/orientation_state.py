from dataclasses import dataclass


@dataclass(frozen=True)
class OrientationSample:
    """One calibrated sensor reading, consumed by the filter buffers"""
    azimuth_degrees: float    # Relative heading [0, 360)
    elevation_degrees: float  # Pointing angle [-90, 90]


@dataclass(frozen=True)
class SmoothedOrientation:
    """Published device orientation; replaced as a whole, never mutated"""
    azimuth: float = 0.0      # [0, 360), relative to the calibration reference
    elevation: float = 0.0    # [-90, 90], 0 = horizon
    timestamp: float = 0.0    # Clock value at publish time
