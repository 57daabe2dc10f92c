import bpy
from typing import List, Optional, Tuple, TypeVar
from . import config
from .errors import FormatError
from .gma import EmptySlot, GmaArchive
from .render import CollectingRenderer, ModelVertex, RenderedObject, strip_to_triangles


T = TypeVar('T')


def y_up_to_z_up(vert: Tuple[T, T, T]) -> Tuple[T, T, T]:
    """
    convert from file format coordinates (Y-axis is up)
    to Blender coordinates (Z-axis is up)
    """
    if not config.CONVERT_Y_UP:
        return vert
    x, y, z = vert
    return (x, -z, y)


def get_collection(name: str) -> bpy.types.Collection:
    collection = bpy.data.collections.get(name)
    if collection is None:
        collection = bpy.data.collections.new(name)
        bpy.context.scene.collection.children.link(collection)
    return collection


def build_mesh(rendered: RenderedObject) -> bpy.types.Mesh:
    # Strips don't share vertices with each other,
    # so every strip vertex becomes its own Blender vertex.
    vertices: List[ModelVertex] = []
    faces: List[Tuple[int, int, int]] = []
    for strip in rendered.strips:
        base = len(vertices)
        faces.extend(tuple(base + i for i in tri)
                     for tri in strip_to_triangles(strip))
        vertices.extend(strip)

    mesh: bpy.types.Mesh = bpy.data.meshes.new(rendered.name)
    mesh.from_pydata([y_up_to_z_up(v.position) for v in vertices], [], faces)

    if any(v.texcoord is not None for v in vertices):
        uv_layer = mesh.uv_layers.new(name=config.UV_LAYER_NAME)
        for loop in mesh.loops:
            texcoord = vertices[loop.vertex_index].texcoord or (0.0, 0.0)
            # the format has V pointing down
            uv_layer.data[loop.index].uv = (texcoord[0], 1.0 - texcoord[1])

    if any(v.color is not None for v in vertices):
        colors = mesh.color_attributes.new(
            name=config.COLOR_ATTRIBUTE_NAME, type='BYTE_COLOR', domain='POINT')
        for i, v in enumerate(vertices):
            color = v.color or (255, 255, 255, 255)
            colors.data[i].color = [c / 255 for c in color]

    mesh.update()
    if vertices and all(v.normal is not None for v in vertices):
        mesh.normals_split_custom_set_from_vertices(
            [y_up_to_z_up(v.normal) for v in vertices])
    return mesh


def import_file(filename: str) -> None:
    with open(filename, "rb") as f:
        archive = GmaArchive.from_reader(f)

    renderer = CollectingRenderer()
    archive.render(renderer)

    collection = get_collection("gma")
    num_meshes = 0
    for slot, rendered in zip(archive, renderer.objects):
        mesh: Optional[bpy.types.Mesh] = None
        if not isinstance(slot, EmptySlot):
            mesh = build_mesh(rendered)
            num_meshes += 1
        # empty slots become Blender empties, keeping the slot order visible
        obj: bpy.types.Object = bpy.data.objects.new(rendered.name, mesh)
        collection.objects.link(obj)

    if config.PRINT_SUMMARY:
        print(f"""imported "{filename}":
{len(archive)} slots, {num_meshes} meshes
{sum(len(o.strips) for o in renderer.objects)} triangle strips
""")


class ImportOperator(bpy.types.Operator):
    bl_idname = "import_scene.gma"
    bl_label = "Import GMA model archive"

    # gets set by the file select window - internal Blender Magic or whatever.
    filepath: bpy.props.StringProperty(
        name="File Path", description="File path used for importing the .gma file", maxlen=1024, default="")

    filter_glob: bpy.props.StringProperty(default="*.gma", options={'HIDDEN'})

    def execute(self, context):
        try:
            import_file(self.properties.filepath)
        except FormatError as e:
            self.report({'ERROR'}, str(e))
            return {'CANCELLED'}
        return {'FINISHED'}

    def invoke(self, context, event):
        # sets self.properties.filename and runs self.execute()
        context.window_manager.fileselect_add(self)
        return {'RUNNING_MODAL'}


def import_menu_func(self, context):
    self.layout.operator(ImportOperator.bl_idname,
                         text="GMA model archive (.gma)")


def register():
    bpy.utils.register_class(ImportOperator)
    bpy.types.TOPBAR_MT_file_import.append(import_menu_func)


def unregister():
    bpy.types.TOPBAR_MT_file_import.remove(import_menu_func)
    bpy.utils.unregister_class(ImportOperator)
