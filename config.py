# render

# Empty archive slots are rendered as objects without geometry,
# so that the n-th rendered object is the n-th slot.
EMPTY_OBJECT_NAME = "EmptyObject"

# import

# GMA files are Y-up, Blender is Z-up
CONVERT_Y_UP = True
UV_LAYER_NAME = "UVMap"
COLOR_ATTRIBUTE_NAME = "Col"
# print what got imported to the console
PRINT_SUMMARY = True
