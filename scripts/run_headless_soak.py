"""Run the particle engine without a display and print a few health figures.

Usage:
  python scripts/run_headless_soak.py [frames] [width] [height]
"""
import math
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from glowfield.frame_loop import FrameLoop, ManualScheduler, NullSurface
from glowfield.registry import GroupRegistry

frames = int(sys.argv[1]) if len(sys.argv) > 1 else 600
w = int(sys.argv[2]) if len(sys.argv) > 2 else 1280
h = int(sys.argv[3]) if len(sys.argv) > 3 else 720

registry = GroupRegistry()
surface = NullSurface()
scheduler = ManualScheduler()
hovered = set()
loop = FrameLoop.from_state(registry, surface, scheduler, lambda: hovered)
loop.start(w, h)

for frame in range(frames):
    # hover each button in turn for a second of frames
    hovered = {(frame // 60) % max(1, len(registry.hover_groups))}
    scheduler.advance(loop.frame_interval_ms)

positions = [
    (link.x, link.y)
    for group in registry.groups()
    for chain in group.chains
    for link in chain.links
]
print('Frames rendered:', loop.frame_count)
print('Discs drawn:', surface.discs)
print('Chains per group:', registry.chain_counts())
print('All positions finite?', all(math.isfinite(x) and math.isfinite(y) for x, y in positions))
loop.stop()
print('Pending callbacks after stop:', scheduler.pending)
