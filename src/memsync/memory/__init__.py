"""Memory template storage.

Layout:
    ~/.memsync/data/
    ├── template.md                # Live template (anchor + sections)
    ├── presets/
    │   └── dave.md                # Named snapshots, frontmatter + template body
    └── .versions/                 # Timestamped backups of template.md
"""
