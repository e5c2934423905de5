"""Factory functions creating ready-made articulated chains."""

from .chain import KinematicChain
from .transforms import scale, translation

SPHERE = "sphere"


def articulated_human() -> KinematicChain:
    """Create a torso/head/right-arm rig with a 7-DOF right arm.

    Layout (placement offsets in the parent body frame)::

        root (fixed, (0, 5, 0))      -> torso
          neck (fixed, (0, 2.5, 0))  -> head
          r_shoulder (xyz, (0.6, 2, 0)) -> ru_arm
            r_elbow (xy, (2.4, 0, 0))   -> rl_arm
              r_wrist (xz, (2, 0, 0))   -> r_hand, end effector "right_hand" at (0.8, 0, 0)

    Every body is drawn with the ``"sphere"`` shape, stretched and shifted by
    its local transform so it spans the segment up to the next joint.

    ``theta`` layout: ``[shoulder x, y, z, elbow x, y, wrist x, z]``.
    """
    chain = KinematicChain()

    torso = chain.add_body("torso", SPHERE, scale(1.0, 2.5, 0.5))
    chain.add_joint("root", None, torso, placement=translation(0.0, 5.0, 0.0))

    head = chain.add_body("head", SPHERE, translation(0.0, 0.6, 0.0) @ scale(0.6, 0.6, 0.6))
    chain.add_joint("neck", torso, head, placement=translation(0.0, 2.5, 0.0))

    ru_arm = chain.add_body("ru_arm", SPHERE, translation(1.2, 0.0, 0.0) @ scale(1.2, 0.2, 0.2))
    chain.add_joint(
        "r_shoulder",
        torso,
        ru_arm,
        placement=translation(0.6, 2.0, 0.0),
        axes=(True, True, True),
    )

    rl_arm = chain.add_body("rl_arm", SPHERE, translation(1.0, 0.0, 0.0) @ scale(1.0, 0.2, 0.2))
    chain.add_joint(
        "r_elbow",
        ru_arm,
        rl_arm,
        placement=translation(2.4, 0.0, 0.0),
        axes=(True, True, False),
    )

    r_hand = chain.add_body("r_hand", SPHERE, translation(0.4, 0.0, 0.0) @ scale(0.4, 0.3, 0.2))
    chain.add_joint(
        "r_wrist",
        rl_arm,
        r_hand,
        placement=translation(2.0, 0.0, 0.0),
        axes=(True, False, True),
    )

    chain.add_end_effector("right_hand", "r_wrist", (0.8, 0.0, 0.0))
    return chain
