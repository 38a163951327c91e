"""
Reading core for the PDF library viewer.

Toolkit-independent state for one open document: page navigation, gesture
classification, zoom/fullscreen/immersive modes, the page notes overlay and
debounced persistence of reading progress.
"""
