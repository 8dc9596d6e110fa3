import numpy as np
import trimesh

# ----------------------------------------------------------------------------------------

def _rotation_basis(basis: np.ndarray, scale: np.ndarray) -> np.ndarray:
    """
    Get the rotation part of a basis, filling in axes with zero scale.

    Args:
        basis: the 3x3 rotation-scale matrix
        scale: the signed scale of each column

    Returns:
        rotation: the 3x3 rotation matrix
    """

    collapsed = [i for i in range(3) if scale[i] == 0]
    rotation = np.eye(3)
    for i in range(3):
        if i not in collapsed:
            rotation[:, i] = basis[:, i] / scale[i]

    if len(collapsed) == 1:
        i = collapsed[0]
        axis = np.cross(rotation[:, (i + 1) % 3], rotation[:, (i + 2) % 3])
        if np.linalg.norm(axis) > 0:
            rotation[:, i] = axis / np.linalg.norm(axis)
            return rotation
        # The remaining axes are parallel, complete from one of them
        collapsed.append((i + 2) % 3)

    if len(collapsed) == 2:
        i = next(i for i in range(3) if i not in collapsed)
        u = rotation[:, i].copy()
        # The identity axis least aligned with u keeps the completion well conditioned
        e = np.eye(3)[int(np.argmin(np.abs(u)))]
        v = e - np.dot(e, u) * u
        v /= np.linalg.norm(v)
        rotation[:, (i + 1) % 3] = v
        rotation[:, (i + 2) % 3] = np.cross(u, v)

    return rotation

# ----------------------------------------------------------------------------------------

class Transform:
    def __init__(self,
                 translation: list[float] | np.ndarray | None = None,
                 rotation: list[float] | np.ndarray | None = None,
                 scale: list[float] | np.ndarray | None = None) -> None:
        """
        Initialize a local transform.

        Args:
            translation: the translation [x, y, z]
            rotation: the rotation quaternion [x, y, z, w]
            scale: the scale [x, y, z]
        """

        self.translation: np.ndarray = np.array([0.0, 0.0, 0.0] if translation is None else translation, dtype=float)
        self.rotation: np.ndarray = np.array([0.0, 0.0, 0.0, 1.0] if rotation is None else rotation, dtype=float)
        self.scale: np.ndarray = np.array([1.0, 1.0, 1.0] if scale is None else scale, dtype=float)

        if self.translation.shape != (3,) or self.rotation.shape != (4,) or self.scale.shape != (3,):
            raise ValueError(f"Invalid transform shapes: translation {self.translation.shape}, "
                             f"rotation {self.rotation.shape}, scale {self.scale.shape}")

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "Transform":
        """
        Decompose a 4x4 affine matrix into a transform.

        A negative determinant is folded into the x scale. A collapsed axis gets
        a zero scale and a basis axis completing the others to a rotation.

        Args:
            matrix: the 4x4 matrix

        Returns:
            transform: the decomposed transform
        """

        matrix = np.asarray(matrix, dtype=float)
        if matrix.shape != (4, 4):
            raise ValueError(f"Expected a 4x4 matrix, got {matrix.shape}")

        basis = matrix[:3, :3]
        scale = np.linalg.norm(basis, axis=0)
        if np.linalg.det(basis) < 0:
            scale[0] = -scale[0]

        rotation_matrix = np.eye(4)
        rotation_matrix[:3, :3] = _rotation_basis(basis, scale)
        w, x, y, z = trimesh.transformations.quaternion_from_matrix(rotation_matrix)

        return cls(translation=matrix[:3, 3], rotation=[x, y, z, w], scale=scale)

    @property
    def matrix(self) -> np.ndarray:
        """
        Returns:
            The 4x4 matrix T @ R @ S of the transform
        """

        x, y, z, w = self.rotation
        matrix = trimesh.transformations.quaternion_matrix([w, x, y, z])
        matrix[:3, :3] = matrix[:3, :3] * self.scale
        matrix[:3, 3] = self.translation
        return matrix

    @property
    def basis(self) -> np.ndarray:
        """
        Returns:
            The 3x3 rotation-scale part of the matrix
        """

        return self.matrix[:3, :3]

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.translation))
                    and np.all(np.isfinite(self.rotation))
                    and np.all(np.isfinite(self.scale)))

    def is_close(self, other: "Transform", atol: float = 1e-9) -> bool:
        """
        Compare two transforms by their matrices, tolerating float noise.

        Args:
            other: the transform to compare against
            atol: the absolute tolerance

        Returns:
            close: whether the matrices match within tolerance
        """

        return bool(np.allclose(self.matrix, other.matrix, atol=atol))

    def copy(self) -> "Transform":
        return Transform(self.translation.copy(), self.rotation.copy(), self.scale.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return (np.array_equal(self.translation, other.translation)
                and np.array_equal(self.rotation, other.rotation)
                and np.array_equal(self.scale, other.scale))

    def __repr__(self) -> str:
        return (f"Transform(translation={self.translation.tolist()}, "
                f"rotation={self.rotation.tolist()}, scale={self.scale.tolist()})")
