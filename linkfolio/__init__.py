"""linkfolio: profile import, enhancement and website generation backend."""
