from inspect import signature
from typing import Annotated, Callable, get_origin, get_args
from simplexsolver.utils import Interval
from simplexsolver.function_generators import fun_nonlinear as fun_generator
import logging
import optuna
import time
import numpy as np
import click
import matplotlib.pyplot as plt
from simplexsolver.optimizers import OPTIMIZERS  # Import the mapping
from simplexsolver.optimizers.exceptions import OptimizationError

N_DIMS_TUNE = 2
N_DIMS_TEST = 2


def generate_test_functions(n_samples, n_dims, function_names=None, seed=None) -> list[tuple[Callable, np.ndarray]]:
    # Generate a list of [function, optimum] pairs
    rng = np.random.default_rng(seed)
    function_names = function_names or fun_generator.FUNCTIONS_AND_OPTIMA.keys()
    output_functions_and_optima = []
    for func_name in function_names:
        for _ in range(n_samples):
            func, optimum_x = fun_generator.get_function_and_optimum(func_name, n_dims=n_dims, rng=rng)
            output_functions_and_optima.append((func, optimum_x))
    return output_functions_and_optima


def log_error(test_func: Callable, x_hat: np.ndarray, optimum: np.ndarray) -> float:
    """
    log10 of the error in objective value, relative to the optimal value when that is
    away from zero and absolute otherwise.
    """
    f_opt = test_func(optimum)
    rel_error = np.abs(test_func(x_hat) - f_opt) / max(1.0, np.abs(f_opt))
    if rel_error <= 1e-12:
        return -12  # Avoid log-zero issues when very small numbers
    return np.log10(rel_error)


def multivariate_model_runner(minimizer: Callable, func_optima_tuples: list[tuple[Callable, np.ndarray]], **kwargs) -> tuple[float, float]:
    """
    Return a bivariate metric for performance of the minimizer: the mean log error
    across a set of test functions, plus the time taken to run all minimizations.

    Kwargs are Optuna trial.suggest_* parameters.
    """

    log_errors = []
    time_start = time.time()

    for test_func, optimum in func_optima_tuples:
        x_hat = minimizer(fun=test_func, initial_guess=np.zeros(len(optimum)), **kwargs)
        log_errors.append(log_error(test_func, x_hat, optimum))

    time_elapsed = time.time() - time_start
    print(f"Trial with params {kwargs} took {time_elapsed:.2f}s, mean log errors: {np.mean(log_errors):.3f}")

    return np.mean(log_errors), time_elapsed


def univariate_model_runner(**kwargs):
    log_err, time_elapsed = multivariate_model_runner(**kwargs)
    total_loss = np.mean(log_err) + time_elapsed
    return total_loss


def make_optuna_objective(minimizer_to_test: Callable,
                          func_optima_tuples: list[tuple[Callable, np.ndarray]]) -> Callable:
    sig = signature(minimizer_to_test)

    # The term "trial" is magic used by Optuna
    def optuna_loss(trial):
        kwargs = {'minimizer': minimizer_to_test, 'func_optima_tuples': func_optima_tuples}
        for name, param in sig.parameters.items():
            if name in ['fun', 'initial_guess']:
                continue
            anno = param.annotation
            if get_origin(anno) is Annotated:
                base_type, meta = get_args(anno)
                if isinstance(meta, Interval):
                    if base_type is int:
                        if meta.log:
                            step = None
                        else:
                            step = meta.step if meta.step is not None else 1
                        kwargs[name] = trial.suggest_int(name, meta.low, meta.high,
                                                         step=step, log=meta.log)
                    else:
                        if meta.log:
                            step = None
                        else:
                            step = meta.step if meta.step is not None else (meta.high - meta.low) / 100
                        kwargs[name] = trial.suggest_float(name, meta.low, meta.high,
                                                           step=step, log=meta.log)
                elif isinstance(meta, list) and base_type is str:
                    kwargs[name] = trial.suggest_categorical(name, meta)
                else:
                    raise ValueError(f"Unsupported metadata for {name}: {meta}")
            else:
                kwargs[name] = param.default

        try:
            return univariate_model_runner(**kwargs)
        except OptimizationError as e:
            # Budget exhaustion or a bad parameter combination; let Optuna prune the trial
            raise optuna.TrialPruned(str(e)) from e

    return optuna_loss


def tune_minimizer(minimizer_to_test: Callable, n_trials: int = 50, seed: int | None = None):
    """
    Tune the minimizer using Optuna.

    :param minimizer_to_test: The minimizer function to tune.
    :param n_trials: Number of trials for tuning.
    :return: The best parameters found by Optuna.
    """
    tune_functions = generate_test_functions(n_samples=2, n_dims=N_DIMS_TUNE, seed=seed)
    objective = make_optuna_objective(minimizer_to_test, func_optima_tuples=tune_functions)
    study = optuna.create_study(direction="minimize")
    study.optimize(objective, n_trials=n_trials)
    return study.best_params


def test_minimizer(minimizer_to_test: Callable, n_tuning_trials: int = 50, seed: int | None = None):
    """
    Test the minimizer with a set of test functions.

    :return: None
    """
    best_params = tune_minimizer(minimizer_to_test=minimizer_to_test, n_trials=n_tuning_trials, seed=seed)
    print("Best parameters found:", best_params)
    test_functions = generate_test_functions(n_samples=2, n_dims=N_DIMS_TEST,
                                             seed=None if seed is None else seed + 1)
    log_errors, time_elapsed = multivariate_model_runner(minimizer=minimizer_to_test,
                                                         func_optima_tuples=test_functions,
                                                         **best_params)
    print(f"Test results: time elapsed = {time_elapsed:.2f}s, mean log errors {log_errors:.3f}")


def benchmark_all_optimizers(n_tune_functions: int = 2, n_test_functions: int = 2,
                             n_tuning_trials: int = 10, n_dims: int = 2, save_path: str | None = None,
                             optimizer_names: list[str] | None = None,
                             seed: int | None = None, show: bool = True):
    """
    Benchmark optimizers and create a scatter plot.

    Args:
        n_tune_functions: Number of functions to use for tuning
        n_test_functions: Number of functions to use for testing
        n_tuning_trials: Number of trials for hyperparameter tuning
        n_dims: Number of dimensions for the test functions
        save_path: Path to save the plot
        optimizer_names: List of optimizer names to test. If None, test all optimizers.
        seed: Seed for the random test functions
        show: Display the plot window
    """
    tune_functions = generate_test_functions(n_samples=n_tune_functions, n_dims=n_dims, seed=seed)
    test_functions = generate_test_functions(n_samples=n_test_functions, n_dims=n_dims,
                                             seed=None if seed is None else seed + 1)

    # Get optimizers to test
    if optimizer_names is None:
        optimizer_names = list(OPTIMIZERS.keys())
        optimizer_functions = list(OPTIMIZERS.values())
    else:
        optimizer_functions = []
        valid_names = []
        for name in optimizer_names:
            if name in OPTIMIZERS:
                optimizer_functions.append(OPTIMIZERS[name])
                valid_names.append(name)
            else:
                print(f"Warning: Optimizer '{name}' not found, skipping...")
        optimizer_names = valid_names

    print(f"Benchmarking {len(optimizer_names)} optimizers...")
    print(f"Tune functions: {n_tune_functions}, Test functions: {n_test_functions}")
    print(f"Tuning trials: {n_tuning_trials}, Dimensions: {n_dims}")
    print("-" * 60)

    results = []

    for i, (name, optimizer) in enumerate(zip(optimizer_names, optimizer_functions)):
        print(f"[{i+1}/{len(optimizer_names)}] Testing {name}...")

        try:
            objective = make_optuna_objective(optimizer, func_optima_tuples=tune_functions)
            study = optuna.create_study(direction="minimize")
            study.optimize(objective, n_trials=n_tuning_trials)
            best_params = study.best_params

            log_err, time_elapsed = multivariate_model_runner(
                minimizer=optimizer,
                func_optima_tuples=test_functions,
                **best_params
            )

            results.append({
                'name': name,
                'log_error': log_err,
                'time_elapsed': time_elapsed,
                'best_params': best_params
            })

            print(f"  ✓ {name}: log_error={log_err:.3f}, time={time_elapsed:.2f}s")

        except (OptimizationError, ValueError) as e:
            print(f"  ✗ {name}: Failed - {str(e)}")
            continue

    if results:
        create_benchmark_plot(results, save_path=save_path, show=show)

        print("BENCHMARK SUMMARY")
        for result in sorted(results, key=lambda x: x['log_error']):
            print(f"{result['name']:30} | log_error: {result['log_error']:8.3f} | time: {result['time_elapsed']:6.2f}s")

    return results


def pareto_front(times: list[float], errors: list[float]) -> list[tuple[float, float]]:
    pareto_points = []
    for i, (t, error) in enumerate(zip(times, errors)):
        is_pareto = True
        for j, (other_time, other_error) in enumerate(zip(times, errors)):
            if i != j and other_time <= t and other_error <= error:
                is_pareto = False
                break
        if is_pareto:
            pareto_points.append((t, error))
    return sorted(pareto_points)


def create_benchmark_plot(results, save_path: str | None = None, show: bool = True):
    """Create a scatter plot of optimizer performance."""
    names = [r['name'] for r in results]
    log_errors = [r['log_error'] for r in results]
    times = [r['time_elapsed'] for r in results]

    plt.figure(figsize=(12, 8))
    plt.scatter(times, log_errors, s=100, alpha=0.7)

    for i, name in enumerate(names):
        plt.annotate(name.replace('minimize_', ''),
                     (times[i], log_errors[i]),
                     xytext=(5, 5), textcoords='offset points',
                     fontsize=9, alpha=0.8)

    plt.xlabel('Time Elapsed (seconds)')
    plt.ylabel('Log Error')
    plt.title('Optimizer Performance Comparison\n(Lower and Left is Better)')
    plt.grid(True, alpha=0.3)

    pareto_points = pareto_front(times, log_errors)
    if pareto_points:
        pareto_times, pareto_errors = zip(*pareto_points)
        plt.plot(pareto_times, pareto_errors, 'r--', alpha=0.7, label='Pareto Frontier')
        plt.legend()

    plt.tight_layout()
    if save_path is not None:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')
        print(f"Plot saved as '{save_path}'")
    if show:
        plt.show()


@click.group()
@click.option('--verbose', is_flag=True, help='Log optimizer progress')
def cli(verbose):
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@cli.command()
@click.option('--optimizer', type=click.Choice(list(OPTIMIZERS.keys())),
              default='minimize_nelder_mead', help='Which optimizer to run')
@click.option('--function', 'func_name', type=click.Choice(list(fun_generator.FUNCTIONS_AND_OPTIMA.keys())),
              default='rosenbrock', help='Test function to minimize')
@click.option('--n-dims', default=2, help='Number of dimensions for the test function')
@click.option('--seed', default=None, type=int, help='Random seed for the test function')
@click.option('--plot', is_flag=True, help='Show a contour plot of the result (2-d only)')
def solve(optimizer, func_name, n_dims, seed, plot):
    """Run one optimizer on a randomly transformed test function."""
    rng = np.random.default_rng(seed)
    test_func, optimum = fun_generator.get_function_and_optimum(func_name, n_dims=n_dims, rng=rng)
    time_start = time.time()
    x_hat = OPTIMIZERS[optimizer](fun=test_func, initial_guess=np.zeros(n_dims))
    time_elapsed = time.time() - time_start

    click.echo(f"{optimizer} on {func_name} ({n_dims}-d) took {time_elapsed:.3f}s")
    click.echo(f"  x_hat   = {np.array2string(x_hat, precision=6)}")
    click.echo(f"  f(x_hat) = {test_func(x_hat):.6g}")
    click.echo(f"  optimum = {np.array2string(optimum, precision=6)}, f = {test_func(optimum):.6g}")
    click.echo(f"  log error = {log_error(test_func, x_hat, optimum):.3f}")

    if plot and n_dims == 2:
        fun_generator.visualize_function(test_func, optimum=optimum, found=x_hat,
                                         title=f"{optimizer} on {func_name}")


@cli.command()
@click.option('--n-trials', default=50, help='Number of trials for hyperparameter tuning')
@click.option('--optimizer', type=click.Choice(list(OPTIMIZERS.keys())),
              default='minimize_nelder_mead', help='Which optimizer to tune')
@click.option('--seed', default=None, type=int, help='Random seed for the tuning functions')
def tune(n_trials, optimizer, seed):
    """Tune hyperparameters for a specific optimizer."""
    minimizer_func = OPTIMIZERS[optimizer]
    best_params = tune_minimizer(minimizer_to_test=minimizer_func, n_trials=n_trials, seed=seed)

    click.echo(f"Best parameters found for {optimizer}:")
    for param, value in best_params.items():
        click.echo(f"  {param}: {value}")


@cli.command()
@click.option('--optimizer', type=click.Choice(list(OPTIMIZERS.keys())),
              default='minimize_nelder_mead', help='Which optimizer to test')
@click.option('--n-tuning-trials', default=50, help='Number of trials for hyperparameter tuning')
@click.option('--seed', default=None, type=int, help='Random seed for the test functions')
def test(optimizer, n_tuning_trials, seed):
    """Test a specific optimizer with tuned parameters."""
    minimizer_func = OPTIMIZERS[optimizer]
    click.echo(f"Testing {optimizer}...")
    test_minimizer(minimizer_to_test=minimizer_func, n_tuning_trials=n_tuning_trials, seed=seed)


@cli.command()
def list_optimizers():
    """List all available optimizers."""
    click.echo("Available optimizers:")
    click.echo("-" * 40)
    for i, name in enumerate(sorted(OPTIMIZERS.keys()), 1):
        # Extract the algorithm name from the function name
        algo_name = name.replace('minimize_', '').replace('_', ' ').title()
        click.echo(f"{i:2d}. {name:30} ({algo_name})")
    click.echo(f"\nTotal: {len(OPTIMIZERS)} optimizers")


@cli.command()
@click.option('--n-tune-functions', default=3, help='Number of functions to use for tuning')
@click.option('--n-test-functions', default=3, help='Number of functions to use for testing')
@click.option('--n-tuning-trials', default=20, help='Number of trials for hyperparameter tuning')
@click.option('--save-path', default=None, help='Path to save the plot')
@click.option('--n-dims', default=2, help='Number of dimensions for the test functions')
@click.option('--seed', default=None, type=int, help='Random seed for reproducibility')
@click.option('--optimizers', multiple=True, type=click.Choice(list(OPTIMIZERS.keys())),
              help='Specific optimizers to test (can specify multiple times). If not specified, test all optimizers.')
@click.option('--no-show', is_flag=True, help='Do not open the plot window')
def benchmark(n_tune_functions, n_test_functions, n_tuning_trials, save_path, n_dims, seed, optimizers, no_show):
    """Benchmark optimizers and create a scatter plot."""
    optimizer_list = list(optimizers) if optimizers else None

    benchmark_all_optimizers(n_tune_functions=n_tune_functions,
                             n_test_functions=n_test_functions,
                             n_tuning_trials=n_tuning_trials,
                             n_dims=n_dims,
                             save_path=save_path,
                             seed=seed,
                             optimizer_names=optimizer_list,
                             show=not no_show)


if __name__ == '__main__':
    cli()
