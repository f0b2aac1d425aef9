"""
Color-mapped point cloud.

Each point is colored by how far the next cycle's transform would move it:
blue when the pools agree, red where they pull apart.
"""
import matplotlib.pyplot as plt
from chaoscloud import Animation, animate_points

anim = Animation(point_count=50000, transform_count=3, color=True)

fig, ax, ani = animate_points(anim, interval=16, figsize=(8, 8),
                              pointsize=0.4)

# Press any key to start a new cycle immediately
fig.canvas.mpl_connect('key_press_event', lambda event: anim.reshuffle())

plt.show()
anim.close()
