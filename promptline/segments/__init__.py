"""Segment functions that append to a Powerline: cwd, git, kube and small ones."""