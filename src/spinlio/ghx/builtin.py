"""Built-in bicycle component templates.

Each script runs inside a GhPython component on the solver. Parameter
names are bound as free variables and the script assigns its mesh to
``a``, the component's single output.
"""

from __future__ import annotations

from typing import Tuple

from .templates import ComponentTemplate, ParameterDefinition, ValueKind

__all__ = [
    "FORK_TEMPLATE",
    "HANDLEBAR_TEMPLATE",
    "WHEEL_TEMPLATE",
    "builtin_templates",
]


_FORK_SCRIPT = """import Rhino.Geometry as rg
import math

def create_fork(steerer_length, steerer_diameter, crown_width, blade_length, dropout_width, rake):
    steerer_length = float(steerer_length)
    steerer_diameter = float(steerer_diameter)
    crown_width = float(crown_width)
    blade_length = float(blade_length)
    dropout_width = float(dropout_width)
    rake = float(rake)

    mesh = rg.Mesh()

    # steerer tube
    tube = rg.Cylinder(
        rg.Circle(rg.Point3d(0, 0, 0), steerer_diameter / 2),
        steerer_length
    )
    mesh.Append(rg.Mesh.CreateFromCylinder(tube, 12, 1))

    # crown
    crown_height = 20
    crown = rg.Box(
        rg.Plane.WorldXY,
        rg.Interval(-crown_width / 2, crown_width / 2),
        rg.Interval(-crown_height / 2, crown_height / 2),
        rg.Interval(-15, 15)
    )
    crown_mesh = rg.Mesh.CreateFromBox(crown, 2, 2, 2)
    crown_mesh.Translate(rg.Vector3d(0, 0, -crown_height / 2))
    mesh.Append(crown_mesh)

    # blades, raked forward at the dropouts
    blade_radius = 12
    for side in [-1, 1]:
        start = rg.Point3d(side * crown_width / 2, 0, 0)
        end = rg.Point3d(side * dropout_width / 2, blade_length, rake)
        blade_line = rg.Line(start, end)
        blade = rg.Cylinder(
            rg.Circle(rg.Plane(start, rg.Vector3d(0, 1, 0)), blade_radius),
            blade_line.Length
        )
        blade_mesh = rg.Mesh.CreateFromCylinder(blade, 8, 1)
        angle = math.atan2(blade_line.Direction.Z, blade_line.Direction.Y)
        blade_mesh.Rotate(angle, rg.Vector3d(1, 0, 0), start)
        mesh.Append(blade_mesh)

    return mesh

a = create_fork(steerer_length, steerer_diameter, crown_width, blade_length, dropout_width, rake)
"""

_HANDLEBAR_SCRIPT = """import Rhino.Geometry as rg

def create_handlebar(width, rise, reach, drop, diameter):
    width = float(width)
    rise = float(rise)
    reach = float(reach)
    drop = float(drop)
    diameter = float(diameter)

    mesh = rg.Mesh()
    bar_radius = diameter / 2
    half_width = width / 2

    # clamp section
    center_length = 80
    center = rg.Cylinder(rg.Circle(rg.Point3d(0, 0, 0), bar_radius), center_length)
    center_mesh = rg.Mesh.CreateFromCylinder(center, 16, 1)
    center_mesh.Rotate(rg.RhinoMath.ToRadians(90), rg.Vector3d(0, 0, 1), rg.Point3d(0, 0, 0))
    center_mesh.Translate(rg.Vector3d(-center_length / 2, 0, 0))
    mesh.Append(center_mesh)

    extension_length = half_width - center_length / 2 - reach

    for side in [-1, 1]:
        start_x = side * center_length / 2
        end_x = side * (half_width - reach)

        extension = rg.Cylinder(rg.Circle(rg.Point3d(start_x, 0, 0), bar_radius), extension_length)
        extension_mesh = rg.Mesh.CreateFromCylinder(extension, 16, 1)
        extension_mesh.Rotate(rg.RhinoMath.ToRadians(90), rg.Vector3d(0, 0, 1), rg.Point3d(start_x, 0, 0))
        extension_mesh.Translate(rg.Vector3d(side * extension_length / 2, 0, 0))
        mesh.Append(extension_mesh)

        # reach and drop bend
        points = [
            rg.Point3d(end_x, 0, 0),
            rg.Point3d(end_x + side * reach, 0, 0),
            rg.Point3d(end_x + side * reach, -drop, 0),
        ]
        curve = rg.NurbsCurve.Create(False, 3, points)
        mesh.Append(rg.Mesh.CreateFromCurvePipe(curve, bar_radius, 16, 1, rg.MeshPipeCapStyle.Flat, True))

        if rise > 0:
            riser = rg.Cylinder(rg.Circle(rg.Point3d(end_x, 0, 0), bar_radius), rise)
            riser_mesh = rg.Mesh.CreateFromCylinder(riser, 16, 1)
            riser_mesh.Translate(rg.Vector3d(0, 0, rise / 2))
            mesh.Append(riser_mesh)

    return mesh

a = create_handlebar(width, rise, reach, drop, diameter)
"""

_WHEEL_SCRIPT = """import Rhino.Geometry as rg
import math

def create_wheel(rim_diameter, rim_width, rim_depth, hub_width, hub_diameter, spoke_count, spoke_diameter):
    rim_radius = float(rim_diameter) / 2
    rim_width = float(rim_width)
    rim_depth = float(rim_depth)
    hub_width = float(hub_width)
    hub_radius = float(hub_diameter) / 2
    spoke_count = int(spoke_count)
    spoke_radius = float(spoke_diameter) / 2

    mesh = rg.Mesh()

    # rim as a torus swept around the axle (Y axis)
    axle_plane = rg.Plane(rg.Point3d.Origin, rg.Vector3d(0, 1, 0))
    rim = rg.Torus(axle_plane, rim_radius - rim_depth / 2, max(rim_width, rim_depth) / 2)
    mesh.Append(rg.Mesh.CreateFromSurface(rim.ToNurbsSurface(), rg.MeshingParameters.Default))

    # hub shell
    hub_base = rg.Plane(rg.Point3d(0, -hub_width / 2, 0), rg.Vector3d(0, 1, 0))
    hub = rg.Cylinder(rg.Circle(hub_base, hub_radius), hub_width)
    mesh.Append(rg.Mesh.CreateFromCylinder(hub, 2, 16))

    # spokes alternate between the two hub flanges
    inner_rim = rim_radius - rim_depth
    for i in range(spoke_count):
        angle = 2 * math.pi * i / spoke_count
        side = -1 if i % 2 else 1
        start = rg.Point3d(hub_radius * math.cos(angle), side * hub_width / 2, hub_radius * math.sin(angle))
        end = rg.Point3d(inner_rim * math.cos(angle), 0, inner_rim * math.sin(angle))
        spoke_line = rg.Line(start, end)
        spoke = rg.Cylinder(rg.Circle(rg.Plane(start, spoke_line.Direction), spoke_radius), spoke_line.Length)
        mesh.Append(rg.Mesh.CreateFromCylinder(spoke, 1, 6))

    return mesh

a = create_wheel(rim_diameter, rim_width, rim_depth, hub_width, hub_diameter, spoke_count, spoke_diameter)
"""


FORK_TEMPLATE = ComponentTemplate(
    id="fork",
    name="Bicycle Fork",
    description="Parametric bicycle fork component",
    parameter_definitions=(
        ParameterDefinition("steerer_length", "Steerer Length",
                            "Length of the steerer tube in mm", 150, 100, 300, 1),
        ParameterDefinition("steerer_diameter", "Steerer Diameter",
                            "Diameter of the steerer tube in mm", 28.6, 25.4, 31.8, 0.1),
        ParameterDefinition("crown_width", "Crown Width",
                            "Width of the fork crown in mm", 60, 40, 80, 1),
        ParameterDefinition("blade_length", "Blade Length",
                            "Length of the fork blades in mm", 400, 300, 500, 1),
        ParameterDefinition("dropout_width", "Dropout Width",
                            "Width between dropouts in mm", 100, 90, 120, 1),
        ParameterDefinition("rake", "Rake",
                            "Fork rake/offset in mm", 45, 30, 60, 1),
    ),
    script_body=_FORK_SCRIPT,
)

HANDLEBAR_TEMPLATE = ComponentTemplate(
    id="handlebar",
    name="Bicycle Handlebar",
    description="Parametric bicycle handlebar component",
    parameter_definitions=(
        ParameterDefinition("width", "Width",
                            "Total width of the handlebar in mm", 440, 380, 480, 10),
        ParameterDefinition("rise", "Rise",
                            "Vertical rise in mm", 20, 0, 60, 5),
        ParameterDefinition("reach", "Reach",
                            "Horizontal reach in mm", 70, 50, 100, 5),
        ParameterDefinition("drop", "Drop",
                            "Drop measurement in mm", 130, 100, 160, 5),
        ParameterDefinition("diameter", "Tube Diameter",
                            "Diameter of the handlebar tube in mm", 31.8, 25.4, 35, 0.1),
    ),
    script_body=_HANDLEBAR_SCRIPT,
)

WHEEL_TEMPLATE = ComponentTemplate(
    id="wheel",
    name="Bicycle Wheel",
    description="Parametric spoked bicycle wheel",
    parameter_definitions=(
        ParameterDefinition("rim_diameter", "Rim Diameter",
                            "Bead seat diameter of the rim in mm", 622, 305, 635, 1),
        ParameterDefinition("rim_width", "Rim Width",
                            "Outer width of the rim in mm", 25, 15, 45, 1),
        ParameterDefinition("rim_depth", "Rim Depth",
                            "Radial depth of the rim section in mm", 30, 15, 80, 1),
        ParameterDefinition("hub_width", "Hub Width",
                            "Flange-to-flange hub width in mm", 60, 40, 80, 1),
        ParameterDefinition("hub_diameter", "Hub Diameter",
                            "Hub flange diameter in mm", 45, 30, 70, 1),
        ParameterDefinition("spoke_count", "Spoke Count",
                            "Number of spokes", 32, 16, 40, 4, kind=ValueKind.INTEGER),
        ParameterDefinition("spoke_diameter", "Spoke Diameter",
                            "Spoke gauge in mm", 2.0, 1.5, 2.6, 0.1, kind=ValueKind.REAL),
    ),
    script_body=_WHEEL_SCRIPT,
)


def builtin_templates() -> Tuple[ComponentTemplate, ...]:
    """Return the templates shipped with spinlio."""

    return (FORK_TEMPLATE, HANDLEBAR_TEMPLATE, WHEEL_TEMPLATE)
