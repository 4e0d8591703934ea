"""
pipeline/host: host collaborator interfaces.

interfaces.py is plain Python; blender_host.py and blender_scheduler.py need
bpy and are only imported by the add-on runtime (ops.py).
"""
