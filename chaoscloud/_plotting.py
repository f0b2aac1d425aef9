from matplotlib import pyplot
from matplotlib.animation import FuncAnimation
import numpy


class PointCloudPlotter:
    def __init__(self, animation, figsize=(8, 8), pointsize=0.5,
                 point_color=None, background='k'):
        """
        Orthographic view down the z axis of an Animation's point buffers.

        :param animation: chaoscloud.Animation, the driver to step and draw
        :param figsize: tuple, matplotlib figure size in inches
        :param pointsize: float, scatter marker size
        :param point_color: color used when the animation has no color
                            buffer; defaults to white
        :param background: matplotlib color of the axes background
        """
        self.animation = animation
        self.figsize = figsize
        self.pointsize = pointsize
        self.point_color = point_color if point_color is not None else 'w'
        self.background = background

        self.fig = pyplot.figure(figsize=figsize)
        self.ax = self.fig.add_subplot(1, 1, 1)
        self.ax.set_facecolor(background)
        self.fig.patch.set_facecolor(background)
        self.ax.set_aspect('equal')
        self.ax.set_axis_off()

        w, h = figsize
        aspect = w / h
        self.ax.set_xlim(-aspect, aspect)
        self.ax.set_ylim(-1, 1)

        self.scatter = self.ax.scatter([], [], s=pointsize, lw=0,
                                       c=self.point_color)
        self.show_buffers(animation.positions, animation.colors)

    def show_buffers(self, positions, colors=None):
        """Display an (N, 3) position buffer and optional (N, 3) colors."""
        self.scatter.set_offsets(numpy.asarray(positions)[:, :2])
        if colors is not None:
            self.scatter.set_facecolors(numpy.asarray(colors))
        else:
            self.scatter.set_facecolors(self.point_color)
        return self.scatter

    def draw(self, frame=None):
        """FuncAnimation callback: step the animation and redraw."""
        self.animation.step()
        artist = self.show_buffers(self.animation.positions,
                                   self.animation.colors)
        self.animation.field.mark_clean()
        return (artist,)

    def animate(self, frames=None, interval=16, blit=True):
        self.anim = FuncAnimation(self.fig, self.draw, frames=frames,
                                  interval=interval, blit=blit,
                                  cache_frame_data=False)
        return self.anim


def animate_points(animation, frames=None, interval=16, figsize=(8, 8),
                   **kwargs):
    """Animate an Animation in a matplotlib window.

    Returns (fig, ax, anim); keep a reference to ``anim`` while showing.
    """
    plotter = PointCloudPlotter(animation, figsize=figsize, **kwargs)
    anim = plotter.animate(frames=frames, interval=interval)
    return plotter.fig, plotter.ax, anim
