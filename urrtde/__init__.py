"""Client and wire format for the Real-Time Data Exchange interface of robot controllers."""

__version__ = "0.1.0"