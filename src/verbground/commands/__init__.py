"""Shell commands exposing verbground functionalities.

This module contains the shell commands that can be used to interact with verbground.

verbground
==========

``verbground`` applies verbs to a table read from a file,
in the same order they are written on the command line::

    verbground --csv measurements.csv --filter '!is.na(intensity)' --arrange "desc(intensity)" --head 3

It can be tested against the example measurements dataset running it with the following command::

    verbground --example --mutate "ratio = intensity / concentration" --select "sample,replicate,ratio" --arrange "sample,desc(ratio)"

"""
