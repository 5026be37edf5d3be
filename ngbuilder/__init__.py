"""ngbuilder — assembles AngularJS module sources into ordered builds."""

__version__ = "0.1.0"
