"""
The text-overlay editing engine.

- elements: TextElement data model and the element collection
- renderer: Draws the base image and text elements onto a raster surface
- interaction: Pointer-driven select / drag / resize state machine
- snapping: Alignment snapping and guides
- history: Linear undo/redo over committed snapshots
- session: The owned editor context tying the above together
- project_io: Project JSON and image file I/O
- presets: Fonts, palettes and starter elements
- editor_canvas: Widget hosting a session on screen
"""
