"""
The CONTROLLER layer drives the model: it turns pointer events into phase
requests and runs the background render loop.
"""
