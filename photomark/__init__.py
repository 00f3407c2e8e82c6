"""
Photomark - photo annotation editor.

This package contains the main application modules:
- core: Application core and wiring
- ui: Main window
- editor: Annotation model, interaction, rendering and export
- services: Configuration, logging and photo storage
"""

__version__ = "0.1.0"
