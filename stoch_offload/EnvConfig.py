class EnvConfig:
    """
    Default parameter values for the single-UE stochastic offloading model.

    The UE holds one or more task queues, a transmission unit (TU) that sends
    a task to the cloud packet by packet, and a CPU that processes a task
    section by section. One tick = one slot of the DTMC.
    """

    # ===== STATE SPACE SHAPE =====
    # Max tasks waiting in each queue
    TASK_QUEUE_CAPACITY = 5

    # Packets per offloaded task (0 = no TU)
    TU_NUMBER_OF_PACKETS = 2

    # Sections per locally processed task (0 = no CPU)
    CPU_NUMBER_OF_SECTIONS = 3

    # ===== STOCHASTIC PARAMETERS =====
    # alpha: per-tick task arrival probability
    ALPHA = 0.3

    # beta: per-tick packet transmission success probability
    BETA = 0.8

    # gamma: per-tick local section success probability (1.0 = deterministic CPU)
    GAMMA = 1.0

    # ===== POWER =====
    P_TX = 1.5      # W while the TU is busy
    P_LOCAL = 1.5   # W while the CPU is busy
    P_MAX = 500.0   # instantaneous cap, admissions above it are illegal

    # eta: expected power budget; None means "use P_MAX" (non-binding)
    ETA = None

    # ===== ENVIRONMENT =====
    N_CLOUD = 1
    T_RX = 0.0      # cloud round trip, ticks added to each offloaded task

    # ===== LP / SIMULATION =====
    PRECISION = 6
    SIMULATION_TICKS = 20000
    SEED = 0

    # Optimal delay * multiplier must stay under every baseline delay
    ERROR_WINDOW_MULTIPLIER = 0.99
