bl_info = {
    "name": "GMA model archive format",
    "blender": (4, 1, 0),
    "category": "Import-Export",
    "description": "Support for the .gma model archives of GameCube era Super Monkey Ball games",
}


# The codec modules don't need Blender, only the operators do,
# so bpy only gets imported once the add-on is registered.

def register():
    from . import gma_import
    gma_import.register()


def unregister():
    from . import gma_import
    gma_import.unregister()
