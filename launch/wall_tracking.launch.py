from launch import LaunchDescription
from launch_ros.actions import Node
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration, PathJoinSubstitution
from launch_ros.substitutions import FindPackageShare


def generate_launch_description():
    default_params_file = PathJoinSubstitution([
        FindPackageShare('wall_tracking'),
        'config',
        'wall_tracking.yaml'
    ])

    params_file_arg = DeclareLaunchArgument(
        'params_file',
        default_value=default_params_file,
        description='Wall tracking parameter file'
    )

    use_sim_time_arg = DeclareLaunchArgument(
        'use_sim_time',
        default_value='false',
        description='Use simulation (Gazebo) clock if true'
    )

    # Subscribes to: scan, gnss/fix
    # Publishes to: cmd_vel, open_place_arrived, open_place_detection
    # Action: wall_tracking
    wall_tracking_node = Node(
        package='wall_tracking',
        executable='wall_tracking_node',
        name='wall_tracking_node',
        output='screen',
        parameters=[
            LaunchConfiguration('params_file'),
            {'use_sim_time': LaunchConfiguration('use_sim_time')}
        ]
    )

    return LaunchDescription([
        params_file_arg,
        use_sim_time_arg,
        wall_tracking_node
    ])
