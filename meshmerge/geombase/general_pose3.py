"""GeneralPose3 - 3D pose with scale for the scene hierarchy.

Composition formula:
    parent * child:
        new_lin = parent.lin + qrot(parent.ang, parent.scale * child.lin)
        new_ang = qmul(parent.ang, child.ang)
        new_scale = parent.scale * child.scale  # element-wise
"""

import math
import numpy
from meshmerge.geombase.quat import qmul, qrot, qinv, quat_from_matrix


class GeneralPose3:
    """A 3D Pose with scale, represented by rotation quaternion, translation vector, and scale."""

    __slots__ = ('ang', 'lin', 'scale', '_rot_matrix', '_mat')

    def __init__(
        self,
        ang: numpy.ndarray = None,
        lin: numpy.ndarray = None,
        scale: numpy.ndarray = None
    ):
        if ang is None:
            ang = numpy.array([0.0, 0.0, 0.0, 1.0])
        if lin is None:
            lin = numpy.array([0.0, 0.0, 0.0])
        if scale is None:
            scale = numpy.array([1.0, 1.0, 1.0])
        self.ang = numpy.asarray(ang, dtype=float)
        self.lin = numpy.asarray(lin, dtype=float)
        self.scale = numpy.asarray(scale, dtype=float)
        self._rot_matrix = None
        self._mat = None

    def copy(self) -> 'GeneralPose3':
        """Create a copy of the GeneralPose3."""
        return GeneralPose3(
            ang=self.ang.copy(),
            lin=self.lin.copy(),
            scale=self.scale.copy()
        )

    @staticmethod
    def identity() -> 'GeneralPose3':
        return GeneralPose3()

    def rotation_matrix(self) -> numpy.ndarray:
        """Get the 3x3 rotation matrix corresponding to the pose's orientation."""
        if self._rot_matrix is None:
            x, y, z, w = self.ang
            self._rot_matrix = numpy.array([
                [1 - 2*(y**2 + z**2), 2*(x*y - z*w), 2*(x*z + y*w)],
                [2*(x*y + z*w), 1 - 2*(x**2 + z**2), 2*(y*z - x*w)],
                [2*(x*z - y*w), 2*(y*z + x*w), 1 - 2*(x**2 + y**2)]
            ])
        return self._rot_matrix

    def as_matrix(self) -> numpy.ndarray:
        """Get the 4x4 transformation matrix with scale baked in.

        Returns TRS matrix: Translation * Rotation * Scale
        """
        if self._mat is None:
            R = self.rotation_matrix()
            S = numpy.diag(self.scale)
            self._mat = numpy.eye(4)
            self._mat[:3, :3] = R @ S
            self._mat[:3, 3] = self.lin
        return self._mat

    @staticmethod
    def from_matrix(mat: numpy.ndarray) -> 'GeneralPose3':
        """Decompose a 4x4 TRS matrix (no shear) into a GeneralPose3."""
        mat = numpy.asarray(mat, dtype=float)
        rs = mat[:3, :3]
        scale = numpy.linalg.norm(rs, axis=0)
        if numpy.any(scale == 0.0):
            raise ValueError("Cannot decompose matrix with zero scale")
        rot = rs / scale
        if numpy.linalg.det(rot) < 0.0:
            # Reflection is carried by the scale, the rotation stays proper.
            scale[0] = -scale[0]
            rot[:, 0] = -rot[:, 0]
        return GeneralPose3(ang=quat_from_matrix(rot), lin=mat[:3, 3].copy(), scale=scale)

    def inverse(self) -> 'GeneralPose3':
        """Compute the inverse of the pose.

        For pose P = TRS, inverse is S^-1 R^-1 T^-1
        """
        inv_scale = 1.0 / self.scale
        inv_ang = qinv(self.ang)
        inv_lin = qrot(inv_ang, -self.lin) * inv_scale
        return GeneralPose3(ang=inv_ang, lin=inv_lin, scale=inv_scale)

    def __repr__(self):
        return f"GeneralPose3(ang={self.ang}, lin={self.lin}, scale={self.scale})"

    def transform_point(self, point: numpy.ndarray) -> numpy.ndarray:
        """Transform a 3D point using the pose (with scale)."""
        return qrot(self.ang, self.scale * point) + self.lin

    def transform_points(self, points: numpy.ndarray) -> numpy.ndarray:
        """Transform an (N, 3) array of points."""
        points = numpy.asarray(points, dtype=float)
        m = self.as_matrix()
        return points @ m[:3, :3].T + m[:3, 3]

    def inverse_transform_point(self, pnt: numpy.ndarray) -> numpy.ndarray:
        inv_scale = 1.0 / self.scale
        return qrot(qinv(self.ang), pnt - self.lin) * inv_scale

    def __mul__(self, other: 'GeneralPose3') -> 'GeneralPose3':
        """Compose this pose with another pose."""
        if not isinstance(other, GeneralPose3):
            raise TypeError("Can only multiply GeneralPose3 with GeneralPose3")
        q = qmul(self.ang, other.ang)
        t = self.lin + qrot(self.ang, self.scale * other.lin)
        s = self.scale * other.scale
        return GeneralPose3(ang=q, lin=t, scale=s)

    def __matmul__(self, other: 'GeneralPose3') -> 'GeneralPose3':
        return self * other

    def almost_equal(self, other: 'GeneralPose3', eps: float = 1e-6) -> bool:
        """Compare by resulting matrix (q and -q describe the same rotation)."""
        return bool(numpy.allclose(self.as_matrix(), other.as_matrix(), atol=eps))

    # --- Serialization ---

    def to_list(self) -> list:
        """Flat list: lin(3) + ang(4) + scale(3)."""
        return [*self.lin.tolist(), *self.ang.tolist(), *self.scale.tolist()]

    @staticmethod
    def from_list(data) -> 'GeneralPose3':
        if len(data) != 10:
            raise ValueError(f"GeneralPose3 expects 10 values, got {len(data)}")
        return GeneralPose3(
            lin=numpy.array(data[0:3], dtype=float),
            ang=numpy.array(data[3:7], dtype=float),
            scale=numpy.array(data[7:10], dtype=float),
        )

    # --- Factory methods ---

    @staticmethod
    def rotation(axis: numpy.ndarray, angle: float) -> 'GeneralPose3':
        """Create a rotation pose around a given axis by a given angle."""
        axis = numpy.asarray(axis, dtype=float)
        axis = axis / numpy.linalg.norm(axis)
        s = math.sin(angle / 2)
        c = math.cos(angle / 2)
        q = numpy.array([axis[0] * s, axis[1] * s, axis[2] * s, c])
        return GeneralPose3(ang=q)

    @staticmethod
    def translation(x: float, y: float, z: float) -> 'GeneralPose3':
        """Create a translation pose."""
        return GeneralPose3(lin=numpy.array([x, y, z], dtype=float))

    @staticmethod
    def scaling(sx: float, sy: float = None, sz: float = None) -> 'GeneralPose3':
        """Create a scale-only pose.

        If only sx is given, uniform scale is applied.
        """
        if sy is None:
            sy = sx
        if sz is None:
            sz = sx
        return GeneralPose3(scale=numpy.array([sx, sy, sz], dtype=float))

    @staticmethod
    def rotateY(angle: float) -> 'GeneralPose3':
        """Create a rotation pose around the Y axis."""
        return GeneralPose3.rotation(numpy.array([0.0, 1.0, 0.0]), angle)

    @staticmethod
    def rotateZ(angle: float) -> 'GeneralPose3':
        """Create a rotation pose around the Z axis."""
        return GeneralPose3.rotation(numpy.array([0.0, 0.0, 1.0]), angle)
