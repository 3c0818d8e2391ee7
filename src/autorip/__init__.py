"""AutoRip - unattended bulk disc ripping with MakeMKV."""

__version__ = "1.0.0"
