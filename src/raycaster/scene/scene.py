"""Scene container with closest-hit ray traversal.

The Scene owns an ordered collection of planes and an ordered collection of
spheres. Primitives are stored by value in Structure-of-Arrays Taichi fields
that belong to the Scene instance, so several scenes can coexist and nothing
is shared between them.

Traversal is brute force: every plane is tested, then every sphere, in
insertion order. The closest hit strictly inside (t_min, t_max) wins; when two
hits are exactly equally distant the primitive tested first is kept.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.scene.scene import Scene
    >>> scene = Scene()
    >>> scene.add_plane((0, -2, 0), (0, 1, 0), color=(0.5, 0.5, 0.5))
    0
    >>> scene.add_sphere((0, 0, -7), 2.0, color=(0.0, 1.0, 0.0))
    0
    >>> info = scene.cast((0, 0, 0), (0, 0, -1))
    >>> info.hit, info.distance
    (True, 5.0)
"""

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import taichi as ti
import taichi.math as tm

from raycaster.core.ray import Intersection, Ray, as_vec3_tuple, miss_intersection
from raycaster.geometry.plane import Plane, intersect_plane
from raycaster.geometry.sphere import Sphere, intersect_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

Vec3Tuple = tuple[float, float, float]

# Default maximum number of primitives per scene
MAX_PLANES = 64
MAX_SPHERES = 1024

# Default distance window for single-ray queries
DEFAULT_T_MIN = 0.0
DEFAULT_T_MAX = math.inf

DEFAULT_COLOR: Vec3Tuple = (1.0, 1.0, 1.0)


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        plane_index: The index in the plane storage arrays.
        point: A point on the plane.
        normal: The unit normal of the plane.
        color: The flat RGB color of the plane.
    """

    plane_index: int
    point: Vec3Tuple
    normal: Vec3Tuple
    color: Vec3Tuple


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        color: The flat RGB color of the sphere.
    """

    sphere_index: int
    center: Vec3Tuple
    radius: float
    color: Vec3Tuple


@dataclass
class HitInfo:
    """Python-side copy of an Intersection returned by Scene.cast().

    Attributes:
        hit: Whether anything was hit. Other fields are zero on a miss,
            except distance which holds the query's t_max.
        distance: Distance along the ray to the hit point.
        point: World-space hit point.
        normal: Unit surface normal at the hit point.
        color: Flat RGB color of the primitive that was hit.
    """

    hit: bool
    distance: float
    point: Vec3Tuple
    normal: Vec3Tuple
    color: Vec3Tuple


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        planes: List of plane configurations.
        spheres: List of sphere configurations.
    """

    planes: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _validate_color(color: Any) -> Vec3Tuple:
    """Convert and validate an RGB color with components in [0, 1]."""
    rgb = as_vec3_tuple(color, "color")
    if not all(0.0 <= c <= 1.0 for c in rgb):
        raise ValueError(f"color components must be in [0, 1], got {rgb}")
    return rgb


def _read_vec3(entry: dict[str, Any], key: str, kind: str, index: int) -> Vec3Tuple:
    """Read a required 3-vector from a configuration entry."""
    if key not in entry:
        raise ValueError(f"{kind} entry {index} is missing '{key}'")
    return as_vec3_tuple(entry[key], f"{kind} {key}")


@ti.data_oriented
class Scene:
    """An ordered collection of planes and spheres with closest-hit traversal.

    Primitive data lives in Taichi fields sized at construction, so the scene
    can be traversed from any kernel via the trace() Taichi function. A
    Python-side list of PlaneInfo/SphereInfo mirrors the stored primitives
    for inspection and serialization.

    Attributes:
        max_planes: Plane capacity of this scene.
        max_spheres: Sphere capacity of this scene.
    """

    def __init__(self, max_planes: int = MAX_PLANES, max_spheres: int = MAX_SPHERES) -> None:
        """Allocate an empty scene.

        Args:
            max_planes: Maximum number of planes the scene can hold.
            max_spheres: Maximum number of spheres the scene can hold.

        Raises:
            ValueError: If either capacity is less than 1.

        Note:
            Taichi must already be initialized (ti.init) because the scene
            allocates its fields here.
        """
        if max_planes < 1 or max_spheres < 1:
            raise ValueError(
                f"Scene capacities must be at least 1, got planes={max_planes}, "
                f"spheres={max_spheres}"
            )

        self.max_planes = max_planes
        self.max_spheres = max_spheres

        # Plane storage: Structure of Arrays layout for GPU efficiency
        self._plane_points = ti.Vector.field(3, dtype=ti.f32, shape=max_planes)
        self._plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=max_planes)
        self._plane_colors = ti.Vector.field(3, dtype=ti.f32, shape=max_planes)
        self._num_planes = ti.field(dtype=ti.i32, shape=())

        # Sphere storage
        self._sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=max_spheres)
        self._sphere_radii = ti.field(dtype=ti.f32, shape=max_spheres)
        self._sphere_colors = ti.Vector.field(3, dtype=ti.f32, shape=max_spheres)
        self._num_spheres = ti.field(dtype=ti.i32, shape=())

        # Result slots for Python-scope single-ray queries (see cast)
        self._cast_hit = ti.field(dtype=ti.i32, shape=())
        self._cast_distance = ti.field(dtype=ti.f32, shape=())
        self._cast_point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._cast_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._cast_color = ti.Vector.field(3, dtype=ti.f32, shape=())

        self._planes: list[PlaneInfo] = []
        self._spheres: list[SphereInfo] = []

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_plane(
        self,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
        color: tuple[float, float, float] = DEFAULT_COLOR,
    ) -> int:
        """Add a plane to the scene.

        The normal is stored as given and must already be unit length.

        Args:
            point: Any point on the plane as (x, y, z).
            normal: Unit normal of the plane as (x, y, z).
            color: Flat RGB color with components in [0, 1].

        Returns:
            The index of the added plane.

        Raises:
            RuntimeError: If the plane capacity is exceeded.
            ValueError: If a vector is malformed or the color is out of range.
        """
        point_t = as_vec3_tuple(point, "point")
        normal_t = as_vec3_tuple(normal, "normal")
        color_t = _validate_color(color)

        idx = self._num_planes[None]
        if idx >= self.max_planes:
            raise RuntimeError(f"Maximum number of planes ({self.max_planes}) exceeded")

        self._plane_points[idx] = list(point_t)
        self._plane_normals[idx] = list(normal_t)
        self._plane_colors[idx] = list(color_t)
        self._num_planes[None] = idx + 1

        self._planes.append(
            PlaneInfo(plane_index=idx, point=point_t, normal=normal_t, color=color_t)
        )
        return idx

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        color: tuple[float, float, float] = DEFAULT_COLOR,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            color: Flat RGB color with components in [0, 1].

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the sphere capacity is exceeded.
            ValueError: If the radius is not positive, a vector is malformed
                or the color is out of range.
        """
        center_t = as_vec3_tuple(center, "center")
        color_t = _validate_color(color)
        radius = float(radius)
        if not radius > 0.0:
            raise ValueError(f"radius must be positive, got {radius}")

        idx = self._num_spheres[None]
        if idx >= self.max_spheres:
            raise RuntimeError(f"Maximum number of spheres ({self.max_spheres}) exceeded")

        self._sphere_centers[idx] = list(center_t)
        self._sphere_radii[idx] = radius
        self._sphere_colors[idx] = list(color_t)
        self._num_spheres[None] = idx + 1

        self._spheres.append(
            SphereInfo(sphere_index=idx, center=center_t, radius=radius, color=color_t)
        )
        return idx

    def clear(self) -> None:
        """Remove all primitives from the scene.

        Resets the primitive counts to zero. The field data is not cleared
        but will be overwritten when new primitives are added.
        """
        self._num_planes[None] = 0
        self._num_spheres[None] = 0
        self._planes.clear()
        self._spheres.clear()

    @property
    def planes(self) -> tuple[PlaneInfo, ...]:
        """Planes in insertion order."""
        return tuple(self._planes)

    @property
    def spheres(self) -> tuple[SphereInfo, ...]:
        """Spheres in insertion order."""
        return tuple(self._spheres)

    @property
    def plane_count(self) -> int:
        return int(self._num_planes[None])

    @property
    def sphere_count(self) -> int:
        return int(self._num_spheres[None])

    @property
    def primitive_count(self) -> int:
        """Total number of primitives (planes + spheres)."""
        return self.plane_count + self.sphere_count

    # =========================================================================
    # Traversal
    # =========================================================================

    @ti.func
    def trace(self, ray: Ray, t_min: ti.f32, t_max: ti.f32) -> Intersection:
        """Find the closest intersection strictly inside (t_min, t_max).

        Planes are tested before spheres, each group in insertion order. A
        hit replaces the current closest only if it is strictly nearer, so
        exact ties keep the primitive tested first.

        Taichi parallelizes the outermost loop of a kernel. Callers must
        invoke trace() from inside an enclosing loop (a pixel loop, or
        `for _ in range(1)` for a single ray) so the primitive loops here
        run serially in traversal order.

        Args:
            ray: The ray to trace.
            t_min: Exclusive lower bound on the hit distance.
            t_max: Exclusive upper bound on the hit distance.

        Returns:
            The closest Intersection, or a miss record (hit=0) whose distance
            is t_max when nothing qualifies.
        """
        closest = miss_intersection(t_max)

        for i in range(self._num_planes[None]):
            plane = Plane(
                point=self._plane_points[i],
                normal=self._plane_normals[i],
                color=self._plane_colors[i],
            )
            rec = intersect_plane(ray, plane)
            if rec.hit == 1 and rec.distance > t_min and rec.distance < closest.distance:
                closest = rec

        for i in range(self._num_spheres[None]):
            sphere = Sphere(
                center=self._sphere_centers[i],
                radius=self._sphere_radii[i],
                color=self._sphere_colors[i],
            )
            rec = intersect_sphere(ray, sphere)
            if rec.hit == 1 and rec.distance > t_min and rec.distance < closest.distance:
                closest = rec

        return closest

    @ti.kernel
    def _cast_kernel(
        self,
        ox: ti.f32,
        oy: ti.f32,
        oz: ti.f32,
        dx: ti.f32,
        dy: ti.f32,
        dz: ti.f32,
        t_min: ti.f32,
        t_max: ti.f32,
    ):
        for _ in range(1):
            ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
            rec = self.trace(ray, t_min, t_max)
            self._cast_hit[None] = rec.hit
            self._cast_distance[None] = rec.distance
            self._cast_point[None] = rec.point
            self._cast_normal[None] = rec.normal
            self._cast_color[None] = rec.color

    def cast(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = DEFAULT_T_MIN,
        t_max: float = DEFAULT_T_MAX,
    ) -> HitInfo:
        """Trace a single ray from Python and return the closest hit.

        This is a convenience wrapper for debugging and testing. Rendering
        calls trace() directly from its kernel.

        Args:
            origin: Ray origin as (x, y, z).
            direction: Ray direction as (x, y, z), need not be normalized.
            t_min: Exclusive lower bound on the hit distance.
            t_max: Exclusive upper bound on the hit distance.

        Returns:
            A HitInfo describing the closest intersection.
        """
        ox, oy, oz = as_vec3_tuple(origin, "origin")
        dx, dy, dz = as_vec3_tuple(direction, "direction")
        self._cast_kernel(ox, oy, oz, dx, dy, dz, t_min, t_max)

        point = self._cast_point[None]
        normal = self._cast_normal[None]
        color = self._cast_color[None]
        return HitInfo(
            hit=bool(self._cast_hit[None]),
            distance=float(self._cast_distance[None]),
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            color=(float(color[0]), float(color[1]), float(color[2])),
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all planes and spheres in order.
        """
        config = SceneConfig()

        for plane in self._planes:
            config.planes.append(
                {
                    "point": list(plane.point),
                    "normal": list(plane.normal),
                    "color": list(plane.color),
                }
            )

        for sphere in self._spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "color": list(sphere.color),
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and adds the configured primitives in
        order. Colors default to white when omitted.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
            RuntimeError: If the configuration exceeds the scene capacity.
        """
        self.clear()

        for i, plane_config in enumerate(config.planes):
            point = _read_vec3(plane_config, "point", "plane", i)
            normal = _read_vec3(plane_config, "normal", "plane", i)
            color = plane_config.get("color", DEFAULT_COLOR)
            self.add_plane(point, normal, color)

        for i, sphere_config in enumerate(config.spheres):
            center = _read_vec3(sphere_config, "center", "sphere", i)
            if "radius" not in sphere_config:
                raise ValueError(f"sphere entry {i} is missing 'radius'")
            color = sphere_config.get("color", DEFAULT_COLOR)
            self.add_sphere(center, sphere_config["radius"], color)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary with 'planes' and 'spheres' keys.
        """
        config = self.to_config()
        return {
            "planes": config.planes,
            "spheres": config.spheres,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'planes' and 'spheres' keys.
        """
        config = SceneConfig(
            planes=data.get("planes", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    def __repr__(self) -> str:
        """Return a string representation of the scene contents."""
        return f"Scene(planes={self.plane_count}, spheres={self.sphere_count})"


def save_scene(scene: Scene, filepath: str | Path) -> None:
    """Write a scene to a JSON file.

    Args:
        scene: The scene to save.
        filepath: Destination path (typically ending in .json).
    """
    Path(filepath).write_text(json.dumps(scene.to_dict(), indent=2))


def load_scene(filepath: str | Path) -> Scene:
    """Create a scene from a JSON file written by save_scene().

    Args:
        filepath: Path to the JSON scene description.

    Returns:
        A new Scene sized to hold the stored primitives.

    Raises:
        ValueError: If the file is not a JSON object or holds invalid data.
    """
    data = json.loads(Path(filepath).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Scene file {filepath} must contain a JSON object")

    planes = data.get("planes", [])
    spheres = data.get("spheres", [])
    scene = Scene(
        max_planes=max(MAX_PLANES, len(planes)),
        max_spheres=max(MAX_SPHERES, len(spheres)),
    )
    scene.from_dict(data)
    return scene
