"""concert-dl: reassemble segmented concert audio streams into a single file."""

__version__ = "0.1.0"
