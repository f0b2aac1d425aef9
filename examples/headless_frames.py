"""
Headless stepping with the multiprocessing backend.

Runs a fixed 60 fps schedule without a window and saves a snapshot of the
final frame.
"""
import time

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from chaoscloud import Animation
from chaoscloud._plotting import PointCloudPlotter

if __name__ == '__main__':
    with Animation(point_count=200000, transform_count=4, color=True,
                   backend='multiprocessing', workers=4, seed=7) as anim:
        t0 = time.perf_counter()
        for frame in range(600):
            anim.step(now=frame / 60.0)
        dt = time.perf_counter() - t0
        print(f"{anim.frame} frames of {anim.point_count} points in "
              f"{dt:.2f} s ({anim.frame / dt:.1f} fps)")

        plotter = PointCloudPlotter(anim, pointsize=0.2)
        plotter.fig.savefig('chaoscloud.png', dpi=150)
        plt.close(plotter.fig)
