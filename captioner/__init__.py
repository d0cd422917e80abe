"""
Captioner - a visual editor for overlaying styled text onto images.

This package contains the main application modules:
- core: Application core and wiring
- ui: Main window
- editor: Text element model, renderer, interaction, snapping and history
- services: Application services (config, logging)
"""

__version__ = "0.1.0"
