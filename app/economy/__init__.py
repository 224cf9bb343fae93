from app.economy.energy.service import EnergyGate

__all__ = ["EnergyGate"]
