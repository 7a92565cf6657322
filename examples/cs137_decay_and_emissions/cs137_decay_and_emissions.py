from batemanpy import Decay, InventoryEntry, Nuclide

YEAR = 3.154e7

nuclides = {
    "Cs-137": Nuclide("Cs-137", 30.08 * YEAR, daughters={"Ba-137m": 0.947, "Ba-137": 0.053}),
    "Ba-137m": Nuclide("Ba-137m", 2.552 * 60, daughters={"Ba-137": 1.0}, gammas={"661.657": 0.8997}),
    "Ba-137": Nuclide("Ba-137", stable=True),
}

# number of atoms in 1 kg of Cs-137
atoms = 1000 / 136.907 * 6.02214076e23


#1) decay Cs-137 for 30 years.
decay = Decay(nuclides, [InventoryEntry("Cs-137", atoms)])
decay_results = decay.decay_isotopic_mixture(30 * YEAR)
print(decay_results)


#2) determine the gamma emissions of this isotopic mixture
print()
gamma_emissions = decay.return_gamma_emissions_isotopic_mixture(isotopic_mixture=decay_results)
print(gamma_emissions)

#3) decay Cs-137 for multiple decay steps e.g. 10, 20, 30, 40, 50 years.
# the decay chain is prepared only once and reused for every step
decay_results_multiple_steps = decay.decay_isotopic_mixture([i * 10 * YEAR for i in range(1, 6)])
print(decay_results_multiple_steps)
