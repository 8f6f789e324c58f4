import torch


def sd_capsule(points, p0, p1, radius, eps=1e-12):
    """Signed distance function for a capsule, batched over points.

    Differentiable with respect to `p0`, `p1` and `radius` through autograd.

    Args:
        points: (N, 3) tensor of points
        p0: (3,) tensor first axis end point
        p1: (3,) tensor second axis end point
        radius: scalar tensor capsule radius
        eps: Guard on the squared axis length (degenerate axis = sphere at p0)

    Returns:
        (N,) tensor of signed distances (< 0 inside, > 0 outside)
    """
    axis = p1 - p0
    rel = points - p0

    # Clamped projection parameter; a zero-length axis gives t = 0
    length_sq = torch.clamp(torch.dot(axis, axis), min=eps)
    t = torch.clamp(rel @ axis / length_sq, 0.0, 1.0)

    closest = p0 + t[:, None] * axis
    return torch.linalg.norm(points - closest, dim=-1) - radius


def capsule_volume(p0, p1, radius):
    """Capsule volume: pi * r^2 * |p1 - p0| + 4/3 * pi * r^3."""
    length = torch.linalg.norm(p1 - p0)
    return torch.pi * radius**2 * length + (4.0 / 3.0) * torch.pi * radius**3
