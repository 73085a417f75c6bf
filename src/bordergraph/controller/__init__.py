"""
The CONTROLLER layer runs the simulation on the Qt event loop and keeps the
render surface in step with the model.
"""
