"""
The MODEL layer contains pure data structures and layout logic.
It has NO knowledge of the GUI (Qt).
It deals with the border graph, the physics, the viewport maths and styling.
"""
