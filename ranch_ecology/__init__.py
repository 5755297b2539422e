"""ranch-ecology: population, genetics and habitat calculations for game ranches.

A stateless calculation library over read-only snapshots of ranch records:
  - Pedigree inbreeding coefficient (Wright's path method)
  - Veld-based grazer/browser carrying capacity and current stocking
  - Sustainable harvest quota with sex-ratio balancing
  - Breeding-pair and harvest-candidate rankings built on the above
  - SCI trophy scoring against species formulas
"""

__version__ = "0.1.0"
