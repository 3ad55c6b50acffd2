import logging
import os
import pandas as pd


LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logger(name="sigtools", log_file=None, level=logging.INFO):
    """
    Return the package logger, attaching a console handler once and a file
    handler when log_file is given.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        sh = logging.StreamHandler()
        sh.setLevel(level)
        sh.setFormatter(formatter)
        logger.addHandler(sh)

    if log_file is not None:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        known = [getattr(h, 'baseFilename', None) for h in logger.handlers]
        if os.path.abspath(log_file) not in known:
            fh = logging.FileHandler(log_file)
            fh.setLevel(level)
            fh.setFormatter(formatter)
            logger.addHandler(fh)
    return logger


def named_vector(series):
    """Convert a pandas Series into a named R numeric vector."""
    import rpy2.robjects as ro

    vec = ro.FloatVector([float(v) for v in series.values])
    vec.names = ro.StrVector([str(i) for i in series.index])
    return vec


def pandas_to_r(df):
    import rpy2.robjects as ro
    from rpy2.robjects import pandas2ri
    from rpy2.robjects.conversion import localconverter

    with localconverter(ro.default_converter + pandas2ri.converter):
        return ro.conversion.py2rpy(df)


def r_to_pandas(r_dataframe):
    """Convert an R data.frame (or matrix coerced by R) into pandas."""
    import rpy2.robjects as ro
    from rpy2.robjects import pandas2ri
    from rpy2.robjects.conversion import localconverter

    with localconverter(ro.default_converter + pandas2ri.converter):
        df = ro.conversion.rpy2py(r_dataframe)
    if not isinstance(df, pd.DataFrame):
        df = pd.DataFrame(df)
    return df.reset_index(drop=True)


def parse_rpy2_results(r_list_vector):
    """
    Parse an R list of data.frames into a list of pandas DataFrames.
    """
    import rpy2.robjects as ro

    results = []
    for i in range(len(r_list_vector)):
        r_dataframe = ro.r['as.data.frame'](r_list_vector[i], stringsAsFactors=False)
        results.append(r_to_pandas(r_dataframe))
    return results
